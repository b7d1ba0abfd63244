from __future__ import annotations

import io

import numpy as np
from scipy.io.wavfile import read, write

WAV_HEADER_SIZE = 44
PCM16_SCALE = 32767


def to_pcm16(waveform: np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1], scale by 32767 and truncate toward zero."""
    # Scale in double precision; float32 products can round up across an integer.
    audio = np.clip(np.asarray(waveform, dtype=np.float64).reshape(-1), -1.0, 1.0)
    return np.trunc(audio * PCM16_SCALE).astype("<i2")


def encode_wav(waveform: np.ndarray, sample_rate: int) -> bytes:
    """Serialize mono float audio as a 16-bit PCM WAV with the canonical 44-byte header."""
    wav_buffer = io.BytesIO()
    write(wav_buffer, int(sample_rate), to_pcm16(waveform))
    return wav_buffer.getvalue()


def decode_wav(data: bytes) -> tuple[int, np.ndarray]:
    """Return `(sample_rate, float32 samples)` from a PCM16 WAV buffer."""
    sample_rate, audio_int16 = read(io.BytesIO(data))
    audio_float = np.asarray(audio_int16, dtype=np.float32) / PCM16_SCALE
    return int(sample_rate), audio_float
