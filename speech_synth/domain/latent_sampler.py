from __future__ import annotations

from typing import Sequence

import numpy as np

from speech_synth.domain.text.sequence_encoder import length_to_mask

# Floor for the first uniform draw; log(0) would be -inf.
MIN_UNIFORM = 1e-4


class LatentSampler:
    """Draws the masked Gaussian latent that the refinement loop starts from."""

    def __init__(self, rng: np.random.Generator | None = None):
        self._rng = rng if rng is not None else np.random.default_rng()

    def sample(
        self,
        durations: Sequence[float] | np.ndarray,
        *,
        sample_rate: int,
        chunk_size: int,
        latent_channels: int,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return `(latent, latent_mask)` sized from predicted durations in seconds.

        latent: float32 (batch, latent_channels, latent_len)
        latent_mask: float32 (batch, 1, latent_len)
        """
        durations_arr = np.asarray(durations, dtype=np.float64).reshape(-1)
        batch = durations_arr.shape[0]

        wav_lengths = np.floor(durations_arr * sample_rate).astype(np.int64)
        wav_len_max = int(np.floor(durations_arr.max() * sample_rate))
        latent_len = (wav_len_max + chunk_size - 1) // chunk_size
        latent_lengths = (wav_lengths + chunk_size - 1) // chunk_size

        latent = self.standard_normal((batch, latent_channels, latent_len))
        latent_mask = length_to_mask(latent_lengths, latent_len)
        latent *= latent_mask
        return latent, latent_mask

    def standard_normal(self, shape: tuple[int, ...]) -> np.ndarray:
        """Box-Muller transform over two independent uniform draws."""
        u1 = np.maximum(MIN_UNIFORM, self._rng.random(shape))
        u2 = self._rng.random(shape)
        values = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
        return values.astype(np.float32)
