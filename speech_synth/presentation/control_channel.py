from __future__ import annotations

from dataclasses import dataclass, field
from threading import Event, Lock, Timer
from typing import Any, Callable, Mapping

from speech_synth.application.errors import SynthesisError
from speech_synth.application.synthesis_engine import SynthesisEngine
from speech_synth.config import SynthesisDefaults
from speech_synth.domain.text.language import SUPPORTED_LANGUAGES, resolve_language
from speech_synth.domain.vo.voice import VOICES, voice_id_from_name
from speech_synth.infrastructure.audio.wav_encoder import encode_wav
from speech_synth.utils.logger import Logger

MY_ADDRESS = "supertonic-service"
HOST_ADDRESS = "supertonic-host"

Message = dict[str, Any]
TimerFactory = Callable[[float, Callable[[], None]], Any]


@dataclass
class SpeechRequest:
    """State of one `speak` call; replaced on every new utterance."""

    utterance: str
    voice_id: str
    language: str
    speed: float
    stop_event: Event = field(default_factory=Event)
    paused: bool = False


class ReadAloudService:
    """Bridges host request/notification messages to the synthesis engine.

    Every request is answered with exactly one response. Notifications
    (`onStart`, `audioPlay`, `onEnd`, ...) carry no id. Pause and resume only
    signal the host; synthesis keeps running regardless.
    """

    def __init__(
        self,
        engine_factory: Callable[[], SynthesisEngine],
        send: Callable[[Message], None],
        *,
        logger: Logger | None = None,
        defaults: SynthesisDefaults | None = None,
        timer_factory: TimerFactory = Timer,
    ) -> None:
        self.engine_factory = engine_factory
        self.send = send
        self.logger = logger
        self.defaults = defaults or SynthesisDefaults()
        self.timer_factory = timer_factory

        self.engine: SynthesisEngine | None = None
        self.init_error: str | None = None
        self._init_lock = Lock()
        self._state_lock = Lock()
        self._current: SpeechRequest | None = None

    @property
    def is_ready(self) -> bool:
        return self.engine is not None

    @property
    def current_request(self) -> SpeechRequest | None:
        with self._state_lock:
            return self._current

    def initialize(self) -> bool:
        """Build the engine once and advertise voices; failures are reported once."""
        with self._init_lock:
            if self.engine is not None:
                return True
            if self.init_error is not None:
                return False

            try:
                self.engine = self.engine_factory()
            except SynthesisError as e:
                self.init_error = str(e)
                self._error(f"Initialization error: {e}")
                return False

        self._log("Ready! Speech engine is loaded.")
        self.advertise_voices()
        return True

    def advertise_voices(self) -> None:
        voices = [dict(voice, localService=True) for voice in self.get_voices()]
        self.notify("advertiseVoices", {"voices": voices})

    def handle_message(self, message: Mapping[str, Any]) -> None:
        if not isinstance(message, Mapping) or message.get("to") != MY_ADDRESS:
            return
        if message.get("type") != "request":
            return

        request_id = message.get("id")
        method = message.get("method")
        self._log(f"Received request {request_id}: {method}")

        try:
            args = message.get("args") or {}
            if not isinstance(args, Mapping):
                raise TypeError(f"args must be an object, got {type(args).__name__}")
            result = self.handle_request(method, args)
        except Exception as e:
            # Every request gets exactly one response, whatever failed.
            self._error(f"Request error: {e!r}")
            self.respond(request_id, None, str(e) or type(e).__name__)
            return

        self.respond(request_id, result)

    def handle_request(self, method: str | None, args: Mapping[str, Any]) -> Any:
        if method == "speak":
            return self.speak(args)
        if method == "pause":
            return self.pause()
        if method == "resume":
            return self.resume()
        if method == "stop":
            return self.stop()
        if method == "forward":
            return self.forward()
        if method == "rewind":
            return self.rewind()
        if method == "seek":
            return self.seek(args.get("index"))
        if method == "getVoices":
            return self.get_voices()
        raise ValueError(f"Unknown method: {method}")

    def speak(self, args: Mapping[str, Any]) -> None:
        engine = self.engine
        if engine is None:
            raise SynthesisError("TTS engine not initialized")

        request = SpeechRequest(
            utterance=str(args.get("utterance") or ""),
            voice_id=voice_id_from_name(args.get("voiceName"), self.defaults.voice),
            language=resolve_language(args.get("lang") or self.defaults.lang),
            speed=args.get("rate") or self.defaults.speed,
        )
        volume = args.get("volume") or 1.0

        with self._state_lock:
            # A new utterance supersedes whatever was being spoken.
            if self._current is not None:
                self._current.stop_event.set()
            self._current = request

        self._log(
            f"Speaking: {request.utterance[:50]!r} voice={request.voice_id} "
            f"lang={request.language} speed={request.speed}"
        )
        self.notify("onStart", {})

        try:
            result = engine.synthesize(
                request.utterance,
                request.language,
                request.voice_id,
                steps=self.defaults.steps,
                speed=request.speed,
                stop_event=request.stop_event,
            )
        except Exception as e:
            self._error(f"Synthesis error: {e}")
            self.notify("onError", {"error": str(e)})
            raise

        if result is None or request.stop_event.is_set():
            return None

        wav_bytes = encode_wav(result.waveform, result.sample_rate)
        self.notify("audioPlay", {"src": wav_bytes, "rate": 1.0, "volume": volume})

        timer = self.timer_factory(result.duration_seconds, lambda: self._on_playback_end(request))
        timer.daemon = True
        timer.start()
        return None

    def pause(self) -> bool:
        with self._state_lock:
            request = self._current
            should_notify = request is not None and not request.paused
            if should_notify:
                request.paused = True
        if should_notify:
            self.notify("audioPause", {})
        return True

    def resume(self) -> bool:
        with self._state_lock:
            request = self._current
            should_notify = request is not None and request.paused
            if should_notify:
                request.paused = False
        if should_notify:
            self.notify("audioResume", {})
        return True

    def stop(self) -> bool:
        with self._state_lock:
            if self._current is not None:
                self._current.stop_event.set()
                self._current.paused = False
            self._current = None
        return True

    def forward(self) -> bool:
        return True

    def rewind(self) -> bool:
        return True

    def seek(self, index: Any) -> bool:
        return True

    def get_voices(self) -> list[dict[str, Any]]:
        return [
            {
                "voiceName": voice.voice_name,
                "lang": ",".join(SUPPORTED_LANGUAGES),
                "gender": voice.gender,
            }
            for voice in VOICES
        ]

    def notify(self, method: str, args: Mapping[str, Any]) -> None:
        self.send(
            {
                "from": MY_ADDRESS,
                "to": HOST_ADDRESS,
                "type": "notification",
                "method": method,
                "args": dict(args),
            }
        )

    def respond(self, request_id: Any, result: Any, error: str | None = None) -> None:
        self.send(
            {
                "from": MY_ADDRESS,
                "to": HOST_ADDRESS,
                "type": "response",
                "id": request_id,
                "result": result,
                "error": error,
            }
        )

    def _on_playback_end(self, request: SpeechRequest) -> None:
        if request.stop_event.is_set():
            return
        with self._state_lock:
            if self._current is request:
                self._current = None
        self.notify("onEnd", {})

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log(message)

    def _error(self, message: str) -> None:
        if self.logger:
            self.logger.error(message)
