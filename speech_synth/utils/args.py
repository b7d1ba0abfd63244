from __future__ import annotations

import argparse

from speech_synth.config import SynthesisDefaults


def parse_args(argv: list[str], defaults: SynthesisDefaults | None = None) -> argparse.Namespace:
    defaults = defaults or SynthesisDefaults()

    parser = argparse.ArgumentParser(description="Synthesize speech to a WAV file")
    parser.add_argument(
        "text",
        nargs="?",
        help="Text to speak. If omitted, read from stdin.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env). Use empty to disable.",
    )
    parser.add_argument("--voice", default=None, help=f"Voice id (default: {defaults.voice}).")
    parser.add_argument("--lang", default=None, help=f"Language code (default: {defaults.lang}).")
    parser.add_argument("--speed", type=float, default=None, help=f"Speech speed (default: {defaults.speed}).")
    parser.add_argument("--steps", type=int, default=None, help=f"Refinement steps (default: {defaults.steps}).")
    parser.add_argument(
        "-o",
        "--output",
        default="speech.wav",
        help="Output WAV path (default: speech.wav). Use '-' for stdout.",
    )
    parser.add_argument("--play", action="store_true", help="Also play the audio on the default output device.")
    parser.add_argument("--list-voices", action="store_true", help="Print the available voices and exit.")
    return parser.parse_args(argv)
