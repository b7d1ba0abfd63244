from __future__ import annotations

from threading import Event
from typing import Callable, Sequence, TypeVar

import numpy as np

from speech_synth.domain.vo.synthesis_result import SynthesisResult

SILENCE_SECONDS = 0.3

ChunkT = TypeVar("ChunkT")
ProgressCallback = Callable[[int, int], None]


class AudioAssembler:
    """Synthesizes chunks in order and joins them with fixed silence gaps."""

    def __init__(self, *, sample_rate: int, silence_seconds: float = SILENCE_SECONDS):
        self.sample_rate = sample_rate
        self.silence_seconds = silence_seconds

    @property
    def silence_samples(self) -> int:
        return int(round(self.silence_seconds * self.sample_rate))

    def assemble(
        self,
        chunks: Sequence[ChunkT],
        synthesize_chunk: Callable[[ChunkT], tuple[np.ndarray, float]],
        *,
        on_progress: ProgressCallback | None = None,
        stop_event: Event | None = None,
    ) -> SynthesisResult | None:
        """Return the stitched result, or None if `stop_event` was set.

        `stop_event` is checked before each chunk and before returning; a chunk
        already being synthesized runs to completion.
        """
        total = len(chunks)
        parts: list[np.ndarray] = []
        duration = 0.0
        silence = np.zeros(self.silence_samples, dtype=np.float32)

        for index, chunk in enumerate(chunks):
            if stop_event and stop_event.is_set():
                return None

            waveform, chunk_duration = synthesize_chunk(chunk)

            if parts:
                parts.append(silence)
                duration += self.silence_seconds
            parts.append(np.asarray(waveform, dtype=np.float32).reshape(-1))
            duration += float(chunk_duration)

            if on_progress:
                on_progress(index + 1, total)

        if stop_event and stop_event.is_set():
            return None

        waveform = np.concatenate(parts) if parts else np.zeros(0, dtype=np.float32)
        return SynthesisResult(
            waveform=waveform,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
        )
