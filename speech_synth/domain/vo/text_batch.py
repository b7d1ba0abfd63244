from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class TextBatch:
    """Padded id matrix with its validity mask.

    `ids` is int64 of shape (batch, width), 0 for padding and -1 for code points
    the model does not know. `mask` is float32 of shape (batch, 1, width).
    """

    ids: np.ndarray
    mask: np.ndarray
    lengths: tuple[int, ...]

    @property
    def batch_size(self) -> int:
        return int(self.ids.shape[0])

    @property
    def width(self) -> int:
        return int(self.ids.shape[1])
