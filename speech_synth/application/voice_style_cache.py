from __future__ import annotations

from concurrent.futures import Future
from threading import Lock

from speech_synth.application.errors import AssetLoadError
from speech_synth.application.port.model_assets import VoiceStyleProvider
from speech_synth.domain.vo.voice_style import VoiceStyle


class VoiceStyleCache:
    """Process-lifetime voice style cache with single-flight loading.

    The first request for a voice id fetches it; concurrent requests for the
    same id wait on that fetch instead of starting their own. Loaded styles are
    never evicted. A failed fetch is reported to every waiter and forgotten,
    so a later request may try again.
    """

    def __init__(self, provider: VoiceStyleProvider):
        self._provider = provider
        self._lock = Lock()
        self._styles: dict[str, VoiceStyle] = {}
        self._inflight: dict[str, Future[VoiceStyle]] = {}

    def get(self, voice_id: str) -> VoiceStyle:
        style = self._styles.get(voice_id)
        if style is not None:
            return style

        with self._lock:
            style = self._styles.get(voice_id)
            if style is not None:
                return style

            future = self._inflight.get(voice_id)
            owner = future is None
            if future is None:
                future = Future()
                self._inflight[voice_id] = future

        if not owner:
            return future.result()

        try:
            style = self._provider.load(voice_id)
        except AssetLoadError as e:
            self._finish(voice_id, future, error=e)
            raise
        except Exception as e:
            error = AssetLoadError(f"Failed to load voice style {voice_id!r}: {e!r}")
            error.__cause__ = e
            self._finish(voice_id, future, error=error)
            raise error
        except BaseException as e:
            # Interrupts still release the waiters before propagating.
            self._finish(voice_id, future, error=e)
            raise

        self._finish(voice_id, future, style=style)
        return style

    def cached_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._styles)

    def _finish(
        self,
        voice_id: str,
        future: Future[VoiceStyle],
        *,
        style: VoiceStyle | None = None,
        error: BaseException | None = None,
    ) -> None:
        with self._lock:
            if style is not None:
                self._styles[voice_id] = style
            del self._inflight[voice_id]

        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(style)
