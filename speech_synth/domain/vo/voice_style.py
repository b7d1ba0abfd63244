from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np


@dataclass(frozen=True)
class VoiceStyle:
    voice_id: str
    duration_vector: np.ndarray
    encoding_vector: np.ndarray

    @staticmethod
    def from_document(voice_id: str, document: Mapping[str, Any]) -> "VoiceStyle":
        """Build from a `{"style_ttl": {data, dims}, "style_dp": {data, dims}}` document.

        Raises ValueError when either vector is missing or does not match its dims.
        """
        return VoiceStyle(
            voice_id=voice_id,
            duration_vector=_read_tensor(document, "style_dp"),
            encoding_vector=_read_tensor(document, "style_ttl"),
        )


def _read_tensor(document: Mapping[str, Any], key: str) -> np.ndarray:
    try:
        entry = document[key]
        data = np.asarray(entry["data"], dtype=np.float32)
        dims = [int(d) for d in entry["dims"]]
        tensor = data.reshape(dims)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"invalid {key!r} tensor: {e}") from e

    if not np.all(np.isfinite(tensor)):
        raise ValueError(f"invalid {key!r} tensor: non-finite values")

    # Cached styles are shared across requests.
    tensor.setflags(write=False)
    return tensor
