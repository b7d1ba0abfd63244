from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from speech_synth.application.port.model_assets import ModelAssetProvider, VoiceStyleProvider
from speech_synth.application.synthesis_engine import SynthesisEngine, load_engine
from speech_synth.config import AppConfig
from speech_synth.presentation.control_channel import Message, ReadAloudService
from speech_synth.utils.logger import Logger

if TYPE_CHECKING:
    from speech_synth.infrastructure.audio.speaker import Speaker


@dataclass(frozen=True)
class AppContainer:
    config: AppConfig
    logger: Logger
    model_provider: ModelAssetProvider
    voice_provider: VoiceStyleProvider

    def build_engine(self) -> SynthesisEngine:
        return load_engine(self.model_provider, self.voice_provider, logger=self.logger)

    def build_service(self, send: Callable[[Message], None]) -> ReadAloudService:
        return ReadAloudService(
            self.build_engine,
            send,
            logger=self.logger,
            defaults=self.config.defaults,
        )

    def build_speaker(self, sample_rate: int) -> "Speaker":
        # sounddevice needs PortAudio at import time; only load it for playback.
        from speech_synth.infrastructure.audio.speaker import Speaker

        return Speaker(sample_rate=sample_rate)


def build_container(
    config: AppConfig,
    *,
    logger: Logger | None = None,
    model_provider: ModelAssetProvider | None = None,
    voice_provider: VoiceStyleProvider | None = None,
) -> AppContainer:
    logger = logger or Logger()

    if model_provider is None or voice_provider is None:
        from speech_synth.infrastructure.huggingface.asset_fetcher import HubAssetFetcher
        from speech_synth.infrastructure.huggingface.voice_style_provider import (
            HubVoiceStyleProvider,
        )
        from speech_synth.infrastructure.onnx.model_provider import OnnxModelProvider

        fetcher = HubAssetFetcher(config.assets)
        model_provider = model_provider or OnnxModelProvider(fetcher, logger=logger)
        voice_provider = voice_provider or HubVoiceStyleProvider(fetcher)

    return AppContainer(
        config=config,
        logger=logger,
        model_provider=model_provider,
        voice_provider=voice_provider,
    )
