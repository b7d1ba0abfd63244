from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from speech_synth.application.errors import AssetLoadError

DEFAULT_REPO_ID = "Supertone/supertonic-2"
DEFAULT_VOICE = "M3"
DEFAULT_LANG = "en"
DEFAULT_SPEED = 1.0
DEFAULT_STEPS = 5


@dataclass(frozen=True)
class ModelConfig:
    sample_rate: int
    base_chunk_size: int
    chunk_compress_factor: int
    latent_dim: int

    @property
    def chunk_size(self) -> int:
        """Waveform samples covered by one latent frame."""
        return self.base_chunk_size * self.chunk_compress_factor

    @property
    def latent_channels(self) -> int:
        return self.latent_dim * self.chunk_compress_factor

    @staticmethod
    def from_dict(cfgs: Mapping[str, Any]) -> "ModelConfig":
        """Build from the model's `tts.json` document."""
        try:
            ae = cfgs["ae"]
            ttl = cfgs["ttl"]
            return ModelConfig(
                sample_rate=int(ae["sample_rate"]),
                base_chunk_size=int(ae["base_chunk_size"]),
                chunk_compress_factor=int(ttl["chunk_compress_factor"]),
                latent_dim=int(ttl["latent_dim"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise AssetLoadError(f"Malformed model config: {e!r}") from e


@dataclass(frozen=True)
class AssetConfig:
    repo_id: str = DEFAULT_REPO_ID
    onnx_dir: str = "onnx"
    voice_styles_dir: str = "voice_styles"
    revision: str | None = None
    cache_dir: str | None = None


@dataclass(frozen=True)
class SynthesisDefaults:
    voice: str = DEFAULT_VOICE
    lang: str = DEFAULT_LANG
    speed: float = DEFAULT_SPEED
    steps: int = DEFAULT_STEPS


@dataclass(frozen=True)
class AppConfig:
    assets: AssetConfig = field(default_factory=AssetConfig)
    defaults: SynthesisDefaults = field(default_factory=SynthesisDefaults)

    @staticmethod
    def from_env() -> "AppConfig":
        repo_id = os.getenv("SPEECH_SYNTH_REPO_ID") or DEFAULT_REPO_ID
        revision = os.getenv("SPEECH_SYNTH_REVISION") or None
        cache_dir = os.getenv("SPEECH_SYNTH_CACHE_DIR") or None

        voice = os.getenv("SPEECH_SYNTH_VOICE") or DEFAULT_VOICE
        lang = os.getenv("SPEECH_SYNTH_LANG") or DEFAULT_LANG

        speed = DEFAULT_SPEED
        speed_raw = os.getenv("SPEECH_SYNTH_SPEED")
        if speed_raw:
            try:
                speed = float(speed_raw)
            except ValueError as exc:
                raise ValueError("SPEECH_SYNTH_SPEED must be a number.") from exc
            if speed <= 0:
                raise ValueError("SPEECH_SYNTH_SPEED must be greater than 0.")

        steps = DEFAULT_STEPS
        steps_raw = os.getenv("SPEECH_SYNTH_STEPS")
        if steps_raw:
            try:
                steps = int(steps_raw)
            except ValueError as exc:
                raise ValueError("SPEECH_SYNTH_STEPS must be an integer.") from exc
            if steps < 1:
                raise ValueError("SPEECH_SYNTH_STEPS must be at least 1.")

        return AppConfig(
            assets=AssetConfig(
                repo_id=repo_id,
                revision=revision,
                cache_dir=cache_dir,
            ),
            defaults=SynthesisDefaults(
                voice=voice,
                lang=lang,
                speed=speed,
                steps=steps,
            ),
        )
