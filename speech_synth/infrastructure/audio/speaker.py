from __future__ import annotations

from threading import Event

import numpy as np
import sounddevice as sd


class Speaker:
    def __init__(self, *, sample_rate: int = 24_000, prime_silence_ms: int = 200):
        self.sample_rate = sample_rate
        self.prime_silence_ms = prime_silence_ms

    def play(
        self,
        audio: np.ndarray,
        stop_event: Event | None = None,
        chunk_size: int = 1024,
    ) -> bool:
        """Play mono float audio; return False if `stop_event` cut playback short."""
        audio_float = np.asarray(audio, dtype=np.float32).reshape(-1, 1)

        with sd.OutputStream(
            samplerate=self.sample_rate,
            channels=1,
            dtype="float32",
        ) as stream:
            # Prime the device/mixer path with a short silence to avoid
            # startup clicks/pops on some environments.
            prime_frames = int(self.sample_rate * (self.prime_silence_ms / 1000.0))
            if prime_frames > 0:
                stream.write(np.zeros((prime_frames, 1), dtype=np.float32))

            for i in range(0, len(audio_float), chunk_size):
                if stop_event and stop_event.is_set():
                    return False
                stream.write(audio_float[i : i + chunk_size])

        return True
