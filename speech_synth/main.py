from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_sys_path() -> None:
    # Allow running both:
    # - python -m speech_synth.main
    # - python speech_synth/main.py
    if __package__:
        return
    repo_root = str(Path(__file__).resolve().parents[1])
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


def main(argv: list[str] | None = None) -> int:
    _ensure_repo_root_on_sys_path()

    from speech_synth.application.errors import AssetLoadError, InputError, StageInvocationError
    from speech_synth.config import AppConfig
    from speech_synth.di_container import build_container
    from speech_synth.domain.vo.voice import VOICES
    from speech_synth.infrastructure.audio.wav_encoder import encode_wav
    from speech_synth.utils.args import parse_args
    from speech_synth.utils.env import load_dotenv

    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.list_voices:
        for voice in VOICES:
            print(f"{voice.voice_name}\t{voice.description}")
        return 0

    text = args.text
    if text is None:
        text = sys.stdin.read().strip()
    if not text:
        print("Input error: no text to synthesize.", file=sys.stderr)
        return 2

    load_dotenv(args.env_file)

    try:
        config = AppConfig.from_env()
        container = build_container(config)
        container.logger.on_emit = lambda line: print(line, file=sys.stderr)

        defaults = config.defaults
        engine = container.build_engine()
        result = engine.synthesize(
            text,
            args.lang or defaults.lang,
            args.voice or defaults.voice,
            steps=args.steps if args.steps is not None else defaults.steps,
            speed=args.speed if args.speed is not None else defaults.speed,
            on_progress=lambda done, total: container.logger.log(f"Chunk {done}/{total} done."),
        )
        if result is None:
            print("Synthesis was stopped before completion.", file=sys.stderr)
            return 1

        wav_bytes = encode_wav(result.waveform, result.sample_rate)
        if args.output == "-":
            sys.stdout.buffer.write(wav_bytes)
            sys.stdout.buffer.flush()
        else:
            Path(args.output).write_bytes(wav_bytes)
            container.logger.log(f"Wrote {args.output} ({result.duration_seconds:.2f}s).")

        if args.play:
            container.build_speaker(result.sample_rate).play(result.waveform)
        return 0
    except InputError as exc:
        print(f"Input error: {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2
    except AssetLoadError as exc:
        print("Asset error: could not load model or voice assets.", file=sys.stderr)
        print(str(exc), file=sys.stderr)
        return 3
    except StageInvocationError as exc:
        print(f"Inference error in stage {exc.stage}.", file=sys.stderr)
        print(str(exc), file=sys.stderr)
        return 4
    except OSError as exc:
        print(f"I/O error: {exc}", file=sys.stderr)
        return 5


if __name__ == "__main__":
    raise SystemExit(main())
