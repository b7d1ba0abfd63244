from __future__ import annotations

from typing import Callable, Protocol, Sequence

from speech_synth.config import ModelConfig
from speech_synth.domain.vo.voice_style import VoiceStyle

STAGE_NAMES: tuple[str, ...] = (
    "duration_predictor",
    "text_encoder",
    "vector_estimator",
    "vocoder",
)


class ModelAssetProvider(Protocol):
    def load_config(self) -> ModelConfig:
        ...

    def load_indexer(self) -> Sequence[int]:
        """Return the code point to symbol id table."""
        ...

    def load_stage(self, name: str) -> Callable[..., object]:
        """Return a ready callable for one of `STAGE_NAMES`."""
        ...


class VoiceStyleProvider(Protocol):
    def load(self, voice_id: str) -> VoiceStyle:
        ...
