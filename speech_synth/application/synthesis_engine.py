from __future__ import annotations

from threading import Event

import numpy as np

from speech_synth.application.audio_assembler import AudioAssembler, ProgressCallback
from speech_synth.application.errors import AssetLoadError, SynthesisError
from speech_synth.application.inference_orchestrator import (
    DEFAULT_STEPS,
    InferenceOrchestrator,
    validate_speed,
    validate_steps,
)
from speech_synth.application.port.inference_stages import InferenceStages
from speech_synth.application.port.model_assets import (
    STAGE_NAMES,
    ModelAssetProvider,
    VoiceStyleProvider,
)
from speech_synth.application.voice_style_cache import VoiceStyleCache
from speech_synth.domain.latent_sampler import LatentSampler
from speech_synth.domain.text.chunker import chunk_text, max_chunk_length
from speech_synth.domain.text.language import resolve_language
from speech_synth.domain.text.sequence_encoder import SequenceEncoder
from speech_synth.domain.vo.chunk import Chunk
from speech_synth.domain.vo.synthesis_result import SynthesisResult
from speech_synth.infrastructure.audio.wav_encoder import encode_wav
from speech_synth.utils.logger import Logger


class SynthesisEngine:
    def __init__(
        self,
        *,
        encoder: SequenceEncoder,
        orchestrator: InferenceOrchestrator,
        assembler: AudioAssembler,
        voice_styles: VoiceStyleCache,
        logger: Logger | None = None,
    ) -> None:
        self.encoder = encoder
        self.orchestrator = orchestrator
        self.assembler = assembler
        self.voice_styles = voice_styles
        self.logger = logger

    @property
    def sample_rate(self) -> int:
        return self.assembler.sample_rate

    def synthesize(
        self,
        text: str,
        language: str,
        voice_id: str,
        steps: int = DEFAULT_STEPS,
        speed: float = 1.0,
        on_progress: ProgressCallback | None = None,
        stop_event: Event | None = None,
    ) -> SynthesisResult | None:
        """Synthesize `text` chunk by chunk.

        Returns None when `stop_event` is set before the result is ready. Raises
        InputError, AssetLoadError (voice style) or StageInvocationError; no
        partial audio is returned on failure.
        """
        speed = validate_speed(speed)
        steps = validate_steps(steps)
        lang = resolve_language(language)

        style = self.voice_styles.get(voice_id)

        chunks = [Chunk(text=t, lang=lang) for t in chunk_text(text, max_chunk_length(lang))]
        self._log(f"Synthesizing {len(chunks)} chunk(s): voice={voice_id} lang={lang} speed={speed}")

        def synthesize_chunk(chunk: Chunk) -> tuple[np.ndarray, float]:
            batch = self.encoder.encode([chunk.text], [chunk.lang])
            waveform, durations = self.orchestrator.infer(batch, style, steps=steps, speed=speed)
            return waveform[0], float(durations[0])

        try:
            result = self.assembler.assemble(
                chunks,
                synthesize_chunk,
                on_progress=on_progress,
                stop_event=stop_event,
            )
        except SynthesisError as e:
            self._log(f"Synthesis failed: {e}")
            raise

        if result is None:
            self._log("Synthesis stopped before completion.")
        else:
            self._log(f"Synthesized {result.duration_seconds:.2f}s of audio.")
        return result

    def synthesize_wav(
        self,
        text: str,
        language: str,
        voice_id: str,
        steps: int = DEFAULT_STEPS,
        speed: float = 1.0,
        on_progress: ProgressCallback | None = None,
        stop_event: Event | None = None,
    ) -> bytes | None:
        result = self.synthesize(
            text,
            language,
            voice_id,
            steps=steps,
            speed=speed,
            on_progress=on_progress,
            stop_event=stop_event,
        )
        if result is None:
            return None
        return encode_wav(result.waveform, result.sample_rate)

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log(message)


def load_engine(
    model_provider: ModelAssetProvider,
    voice_provider: VoiceStyleProvider,
    *,
    logger: Logger | None = None,
    sampler: LatentSampler | None = None,
) -> SynthesisEngine:
    """Build an engine from model assets.

    Any stage that cannot be constructed is fatal: AssetLoadError is raised and
    no engine is returned.
    """
    try:
        model_config = model_provider.load_config()
        encoder = SequenceEncoder(model_provider.load_indexer())
    except AssetLoadError:
        raise
    except Exception as e:
        raise AssetLoadError(f"Failed to load model config: {e!r}") from e

    loaded = {}
    for i, name in enumerate(STAGE_NAMES, start=1):
        if logger:
            logger.log(f"Loading model {i}/{len(STAGE_NAMES)}: {name}...")
        try:
            loaded[name] = model_provider.load_stage(name)
        except AssetLoadError:
            raise
        except Exception as e:
            if logger:
                logger.error(f"Failed to load {name}: {e!r}")
            raise AssetLoadError(f"Failed to load stage {name!r}: {e!r}") from e

    stages = InferenceStages(
        duration=loaded["duration_predictor"],
        text_encoding=loaded["text_encoder"],
        refinement=loaded["vector_estimator"],
        waveform=loaded["vocoder"],
    )

    return SynthesisEngine(
        encoder=encoder,
        orchestrator=InferenceOrchestrator(stages, model_config, sampler),
        assembler=AudioAssembler(sample_rate=model_config.sample_rate),
        voice_styles=VoiceStyleCache(voice_provider),
        logger=logger,
    )
