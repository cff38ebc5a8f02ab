from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from scribeprep.config import AppConfig, load_config
from scribeprep.errors import ScribePrepError
from scribeprep.pipeline import preprocess_capture
from scribeprep.transcription import TranscriberService
from scribeprep.types import AudioCapture, PreprocessResult

LOGGER = logging.getLogger("scribeprep.app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split speech audio into silence-trimmed 16 kHz WAV chunks and transcribe them."
    )
    parser.add_argument("audio", help="Audio file to transcribe (webm, m4a, mp3, wav, flac, ogg, ...)")
    parser.add_argument(
        "--config",
        default=str(Path(__file__).with_name("config.yaml")),
        help="YAML config file (default: config.yaml next to app.py; missing file = defaults)",
    )
    parser.add_argument("--max-chunk-sec", type=float, default=None, help="Override preprocess.max_chunk_sec")
    parser.add_argument("--provider", choices=["openai", "gemini"], default=None, help="Override transcriber.provider")
    parser.add_argument("--dump-chunks", default=None, help="Write every prepared WAV chunk into this directory")
    parser.add_argument(
        "--preprocess-only",
        action="store_true",
        help="Only prepare chunks and print a summary; no transcription request is made.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure_logging(config: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _dump_chunks(result: PreprocessResult, out_dir: Path, stem: str) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for chunk in result.chunks:
        path = out_dir / f"{stem}_chunk{chunk.index + 1:03d}.wav"
        path.write_bytes(chunk.data)
        LOGGER.info("Wrote %s (%.1fs)", path, chunk.duration_sec)


def _print_summary(result: PreprocessResult) -> None:
    s = result.summary
    print(f"source: {s.source_sample_rate} Hz, {s.source_channels} ch, {s.decoded_duration_sec:.2f}s")
    print(f"after trimming: {s.trimmed_duration_sec:.2f}s")
    print(f"chunks: {s.num_chunks}")
    for i, dur in enumerate(s.chunk_durations_sec, start=1):
        print(f"  {i:3d}: {dur:.2f}s")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(Path(args.config))
    except ScribePrepError as exc:
        _configure_logging(AppConfig(), args.verbose)
        LOGGER.error("%s", exc)
        return 1
    if args.max_chunk_sec is not None:
        config = config.with_max_chunk_sec(args.max_chunk_sec)
    if args.provider is not None:
        config = config.with_provider(args.provider)
    _configure_logging(config, args.verbose)

    audio_path = Path(args.audio)
    try:
        capture = AudioCapture.from_path(audio_path)
        service = TranscriberService()
        if args.preprocess_only or args.dump_chunks:
            result = preprocess_capture(capture, config.preprocess)
            if args.dump_chunks:
                _dump_chunks(result, Path(args.dump_chunks), audio_path.stem)
            if args.preprocess_only:
                _print_summary(result)
                return 0
            text = service.transcribe_prepared(result, config)
        else:
            text = service.transcribe(capture, config)
    except FileNotFoundError as exc:
        LOGGER.error("Audio file not found: %s", exc)
        return 1
    except OSError as exc:
        LOGGER.error("I/O error: %s", exc)
        return 1
    except ScribePrepError as exc:
        LOGGER.error("%s", exc)
        return 1

    print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
