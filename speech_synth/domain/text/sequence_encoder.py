from __future__ import annotations

from typing import Sequence

import numpy as np

from speech_synth.application.errors import InputError
from speech_synth.domain.text.normalizer import normalize_text
from speech_synth.domain.vo.text_batch import TextBatch

PAD_ID = 0
UNKNOWN_ID = -1


def length_to_mask(lengths: Sequence[int], max_len: int | None = None) -> np.ndarray:
    """Return a float32 (batch, 1, width) mask with `min(length, width)` leading ones per row."""
    lengths_arr = np.asarray(lengths, dtype=np.int64).reshape(-1)
    if max_len is None:
        max_len = int(lengths_arr.max()) if lengths_arr.size else 0

    positions = np.arange(max_len, dtype=np.int64)
    mask = (positions[np.newaxis, :] < lengths_arr[:, np.newaxis]).astype(np.float32)
    return mask[:, np.newaxis, :]


class SequenceEncoder:
    def __init__(self, indexer: Sequence[int]):
        self._table = np.asarray(indexer, dtype=np.int64)
        if self._table.ndim != 1:
            raise ValueError("indexer must be a flat code point table")

    def encode(self, texts: Sequence[str], langs: Sequence[str]) -> TextBatch:
        """Normalize and index a batch of texts, padding to the longest one."""
        if not texts:
            raise InputError("cannot encode an empty batch")
        if len(texts) != len(langs):
            raise InputError("texts and langs must have the same length")

        rows = [self.index(normalize_text(text, lang)) for text, lang in zip(texts, langs)]
        lengths = tuple(len(row) for row in rows)
        width = max(lengths)

        ids = np.full((len(rows), width), PAD_ID, dtype=np.int64)
        for i, row in enumerate(rows):
            ids[i, : len(row)] = row

        return TextBatch(ids=ids, mask=length_to_mask(lengths, width), lengths=lengths)

    def index(self, text: str) -> np.ndarray:
        """Map each code point through the table; unknown code points become -1."""
        code_points = np.fromiter((ord(ch) for ch in text), dtype=np.int64, count=len(text))
        known = code_points < len(self._table)
        ids = np.full(code_points.shape, UNKNOWN_ID, dtype=np.int64)
        ids[known] = self._table[code_points[known]]
        return ids
