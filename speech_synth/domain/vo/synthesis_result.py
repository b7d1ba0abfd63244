from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class SynthesisResult:
    waveform: np.ndarray
    duration_seconds: float
    sample_rate: int

    @property
    def sample_count(self) -> int:
        return int(self.waveform.shape[0])
