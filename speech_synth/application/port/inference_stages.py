from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import numpy as np


class DurationStage(Protocol):
    def __call__(
        self, text_ids: np.ndarray, style_dp: np.ndarray, text_mask: np.ndarray
    ) -> np.ndarray:
        """Return predicted durations in seconds, one per batch item."""
        ...


class TextEncodingStage(Protocol):
    def __call__(
        self, text_ids: np.ndarray, style_ttl: np.ndarray, text_mask: np.ndarray
    ) -> Any:
        """Return the text embedding consumed by the refinement stage."""
        ...


class RefinementStage(Protocol):
    def __call__(
        self,
        noisy_latent: np.ndarray,
        text_emb: Any,
        style_ttl: np.ndarray,
        latent_mask: np.ndarray,
        text_mask: np.ndarray,
        current_step: np.ndarray,
        total_step: np.ndarray,
    ) -> np.ndarray:
        """Return the refined latent, same shape as `noisy_latent`."""
        ...


class WaveformStage(Protocol):
    def __call__(self, latent: np.ndarray) -> np.ndarray:
        """Return mono float32 audio at the model sample rate."""
        ...


@dataclass(frozen=True)
class InferenceStages:
    duration: DurationStage
    text_encoding: TextEncodingStage
    refinement: RefinementStage
    waveform: WaveformStage
