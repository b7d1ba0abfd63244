"""Unit tests for ReadAloudService."""
from __future__ import annotations

import unittest
from unittest.mock import MagicMock

import numpy as np

from speech_synth.application.errors import AssetLoadError
from speech_synth.config import SynthesisDefaults
from speech_synth.domain.vo.synthesis_result import SynthesisResult
from speech_synth.presentation.control_channel import HOST_ADDRESS, MY_ADDRESS, ReadAloudService
from speech_synth.utils.logger import Logger


class _FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False

    def start(self):
        self.started = True

    def fire(self):
        self.function()


def _request(method, args=None, request_id=1, to=MY_ADDRESS):
    return {"from": HOST_ADDRESS, "to": to, "type": "request", "id": request_id, "method": method, "args": args or {}}


class TestReadAloudService(unittest.TestCase):
    """Test cases for ReadAloudService."""

    def setUp(self):
        """Set up a service over a mocked engine and a manual timer."""
        self.sent = []
        self.timers = []
        self.engine = MagicMock()
        self.engine.synthesize.return_value = SynthesisResult(
            waveform=np.zeros(2_400, dtype=np.float32), duration_seconds=0.1, sample_rate=24_000
        )
        self.service = ReadAloudService(
            lambda: self.engine,
            self.sent.append,
            defaults=SynthesisDefaults(voice="M3", lang="en", speed=1.0, steps=5),
            timer_factory=self._make_timer,
        )

    def _make_timer(self, interval, function):
        timer = _FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    def _methods(self):
        return [m["method"] for m in self.sent if m["type"] == "notification"]

    def _responses(self):
        return [m for m in self.sent if m["type"] == "response"]

    def test_initialize_advertises_voices(self):
        """Test that a successful start advertises ten local voices."""
        self.assertTrue(self.service.initialize())

        self.assertEqual(self._methods(), ["advertiseVoices"])
        voices = self.sent[0]["args"]["voices"]
        self.assertEqual(len(voices), 10)
        self.assertTrue(all(v["localService"] for v in voices))
        self.assertEqual(voices[0]["lang"], "en,ko,es,pt,fr")

    def test_initialize_failure_is_reported_once(self):
        """Test that a failed engine build is not retried."""
        factory = MagicMock(side_effect=AssetLoadError("no network"))
        service = ReadAloudService(factory, self.sent.append)

        self.assertFalse(service.initialize())
        self.assertFalse(service.initialize())
        factory.assert_called_once()
        self.assertEqual(service.init_error, "no network")
        self.assertEqual(self.sent, [])

    def test_speak_before_initialization_fails(self):
        """Test that speak responds with an error when the engine is missing."""
        self.service.handle_message(_request("speak", {"utterance": "Hello"}))

        responses = self._responses()
        self.assertEqual(len(responses), 1)
        self.assertEqual(responses[0]["error"], "TTS engine not initialized")
        self.engine.synthesize.assert_not_called()

    def test_speak_sends_audio_then_end(self):
        """Test the notification order of a completed utterance."""
        self.service.initialize()
        self.sent.clear()

        self.service.handle_message(
            _request("speak", {"utterance": "Hello", "voiceName": "Supertonic Lily (F2)", "lang": "ko-KR", "rate": 1.5, "volume": 0.5})
        )

        self.assertEqual(self._methods(), ["onStart", "audioPlay"])
        audio = self.sent[1]["args"]
        self.assertEqual(audio["src"][:4], b"RIFF")
        self.assertEqual(audio["volume"], 0.5)
        self.assertEqual(audio["rate"], 1.0)

        args, kwargs = self.engine.synthesize.call_args
        self.assertEqual(args, ("Hello", "ko", "F2"))
        self.assertEqual(kwargs["speed"], 1.5)
        self.assertEqual(kwargs["steps"], 5)

        response = self._responses()[0]
        self.assertEqual(response["id"], 1)
        self.assertIsNone(response["error"])

        self.assertEqual(self.timers[0].interval, 0.1)
        self.assertTrue(self.timers[0].daemon)
        self.timers[0].fire()
        self.assertEqual(self._methods(), ["onStart", "audioPlay", "onEnd"])
        self.assertIsNone(self.service.current_request)

    def test_unknown_voice_name_uses_default(self):
        """Test that an unparseable voice name falls back to the default voice."""
        self.service.initialize()
        self.service.handle_message(_request("speak", {"utterance": "Hi", "voiceName": "Robot"}))

        args, _ = self.engine.synthesize.call_args
        self.assertEqual(args[2], "M3")

    def test_stop_suppresses_end_notification(self):
        """Test that no onEnd follows a stop."""
        self.service.initialize()
        self.service.handle_message(_request("speak", {"utterance": "Hello"}, request_id=1))
        self.service.handle_message(_request("stop", request_id=2))
        self.timers[0].fire()

        self.assertNotIn("onEnd", self._methods())
        self.assertEqual([r["id"] for r in self._responses()], [1, 2])
        self.assertTrue(self._responses()[1]["result"])

    def test_stop_during_synthesis_suppresses_audio(self):
        """Test that a request stopped mid-synthesis never plays."""
        self.service.initialize()

        def synthesize(*args, **kwargs):
            self.service.stop()
            return SynthesisResult(np.zeros(10, dtype=np.float32), 0.0, 24_000)

        self.engine.synthesize.side_effect = synthesize
        self.service.handle_message(_request("speak", {"utterance": "Hello"}))

        self.assertNotIn("audioPlay", self._methods())
        self.assertEqual(len(self._responses()), 1)

    def test_new_speak_cancels_previous(self):
        """Test that a new utterance sets the previous request's stop event."""
        self.service.initialize()
        self.service.handle_message(_request("speak", {"utterance": "One"}, request_id=1))
        first = self.service.current_request
        self.service.handle_message(_request("speak", {"utterance": "Two"}, request_id=2))

        self.assertTrue(first.stop_event.is_set())
        self.timers[0].fire()
        self.assertNotIn("onEnd", self._methods())

    def test_synthesis_error_notifies_and_responds(self):
        """Test that a failed synthesis sends onError and an error response."""
        self.service.initialize()
        self.engine.synthesize.side_effect = AssetLoadError("voice missing")

        self.service.handle_message(_request("speak", {"utterance": "Hello"}))

        self.assertIn("onError", self._methods())
        responses = self._responses()
        self.assertEqual(len(responses), 1)
        self.assertEqual(responses[0]["error"], "voice missing")

    def test_pause_and_resume_notify_once(self):
        """Test that pause and resume toggle state and notify only on change."""
        self.service.initialize()
        self.service.handle_message(_request("speak", {"utterance": "Hello"}))
        self.sent.clear()

        self.service.handle_message(_request("pause", request_id=2))
        self.service.handle_message(_request("pause", request_id=3))
        self.service.handle_message(_request("resume", request_id=4))

        self.assertEqual(self._methods(), ["audioPause", "audioResume"])
        self.assertEqual(len(self._responses()), 3)

    def test_pause_without_request_is_silent(self):
        """Test that pausing with nothing playing sends no notification."""
        self.service.handle_message(_request("pause"))
        self.assertEqual(self._methods(), [])
        self.assertTrue(self._responses()[0]["result"])

    def test_navigation_requests_acknowledge(self):
        """Test that forward, rewind and seek are acknowledged."""
        for i, method in enumerate(("forward", "rewind", "seek"), start=1):
            self.service.handle_message(_request(method, {"index": 3}, request_id=i))

        self.assertEqual([r["result"] for r in self._responses()], [True, True, True])

    def test_get_voices(self):
        """Test that getVoices responds with the voice list."""
        self.service.handle_message(_request("getVoices"))

        voices = self._responses()[0]["result"]
        self.assertEqual(voices[0]["voiceName"], "Supertonic Alex (M1)")
        self.assertEqual(voices[5]["gender"], "female")

    def test_unknown_method(self):
        """Test that an unknown method gets an error response."""
        self.service.handle_message(_request("dance", request_id=9))

        response = self._responses()[0]
        self.assertEqual(response["id"], 9)
        self.assertIn("Unknown method", response["error"])

    def test_non_object_args_get_error_response(self):
        """Test that a request whose args are not an object is still answered."""
        self.service.logger = Logger(prefix="")
        self.service.handle_message(_request("seek", request_id=7) | {"args": [1]})

        responses = self._responses()
        self.assertEqual(len(responses), 1)
        self.assertEqual(responses[0]["id"], 7)
        self.assertIn("args must be an object", responses[0]["error"])
        self.assertTrue(any(line.startswith("error: Request error") for line in self.service.logger.lines()))

    def test_unexpected_error_still_responds(self):
        """Test that an unexpected engine error is reported once and answered."""
        self.service.initialize()
        self.engine.synthesize.side_effect = KeyError("style_ttl")

        self.service.handle_message(_request("speak", {"utterance": "Hello"}, request_id=4))

        responses = self._responses()
        self.assertEqual(len(responses), 1)
        self.assertEqual(responses[0]["id"], 4)
        self.assertIsNotNone(responses[0]["error"])
        self.assertIn("onError", self._methods())

    def test_ignores_foreign_messages(self):
        """Test that messages for another address or of another type are ignored."""
        self.service.handle_message(_request("getVoices", to="someone-else"))
        self.service.handle_message({"to": MY_ADDRESS, "type": "notification", "method": "getVoices"})
        self.service.handle_message("not a message")

        self.assertEqual(self.sent, [])

    def test_response_envelope(self):
        """Test the addressing of outgoing responses."""
        self.service.handle_message(_request("stop", request_id="abc"))

        self.assertEqual(
            self.sent[0],
            {"from": MY_ADDRESS, "to": HOST_ADDRESS, "type": "response", "id": "abc", "result": True, "error": None},
        )


if __name__ == "__main__":
    unittest.main()
