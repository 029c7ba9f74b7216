#!/usr/bin/env python3
"""
CLI interface for transcribing audio with Gemini and post-processing the result.

A single file is transcribed on its own. Several files named as numbered parts
(`name-1.mp3`, `name-2.mp3`, ...) are processed as one batch, in part order,
into a single transcript with continuous speaker identities.

Usage:
    python -m voicenotes.transcription <file.mp3>
    python -m voicenotes.transcription part-1.mp3 part-2.mp3 -o transcript.md --format md
    python -m voicenotes.transcription meeting.m4a --display-format timestamps_and_speakers

Examples:
    # Keep the timestamps exactly as the model returned them
    python -m voicenotes.transcription meeting.m4a --no-repair-timestamps

    # Prefill speaker hints/colors and export verbose diagnostics
    python -m voicenotes.transcription call-*.mp3 --speakers speakers.json \\
        --logging-level verbose --auto-export
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from voicenotes.config import DEFAULT_MODEL, EngineConfig, load_speaker_seeds
from voicenotes.logger import LOGGING_LEVELS, setup_logging
from voicenotes.pipeline import BatchSessionController, plan_units
from voicenotes.transcript import (
    DISPLAY_FORMATS,
    OUTPUT_FORMATS,
    SegmentAssembler,
    TranscriptSession,
    derive_title,
    render_transcript,
)
from voicenotes.transcription.gemini_transcript import GeminiTranscriber


LOGGER_NAMES = ("pipeline", "assembler", "transcription", "transcript", "speakers", "config")

console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transcribe audio with speaker labels and normalized timestamps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("files", nargs="+", type=Path, help="Audio file(s) to transcribe")
    parser.add_argument("-o", "--output", type=Path, help="Write the transcript here instead of stdout")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="txt", help="Output format (doc is HTML for word processors)")
    parser.add_argument(
        "--display-format",
        choices=DISPLAY_FORMATS,
        default="speakers_only",
        help="Which prefixes to show on each line",
    )
    parser.add_argument(
        "--no-repair-timestamps",
        action="store_true",
        help="Pass timestamps through unchanged and do not inherit missing ones",
    )
    parser.add_argument("--speakers", type=Path, help="JSON file of seed speakers")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Gemini model")
    parser.add_argument(
        "--logging-level",
        choices=LOGGING_LEVELS,
        default="basic",
        help="Diagnostics export level",
    )
    parser.add_argument("--auto-export", action="store_true", help="Export diagnostics after the run")
    parser.add_argument("--log-dir", default="logs", help="Directory for diagnostics and log file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging to console")
    return parser


def build_config(args: argparse.Namespace) -> EngineConfig:
    speakers = load_speaker_seeds(args.speakers) if args.speakers else None
    return EngineConfig(
        repair_timestamps=not args.no_repair_timestamps,
        display_format=args.display_format,
        logging_level=args.logging_level,
        auto_export=args.auto_export,
        log_dir=args.log_dir,
        model=args.model,
        speakers=speakers,
    )


async def transcribe_files(files: List[Path], config: EngineConfig) -> TranscriptSession:
    """Run the batch pipeline over the files and return the finished session."""
    session = TranscriptSession(seeds=config.speakers)
    session.log.save_settings(config.snapshot())

    units = plan_units(files)
    controller = BatchSessionController(
        transcriber=GeminiTranscriber(config, session_log=session.log),
        assembler=SegmentAssembler(repair_timestamps=config.repair_timestamps),
        on_progress=lambda done, total: console.print(f"[cyan][{done}/{total}][/cyan] units done"),
        on_status=lambda message: console.print(message, markup=False),
    )
    result = await controller.run(session, units)

    for failure in result.failures:
        console.print(
            f"[yellow]Skipped {escape(failure.name)}: {escape(failure.message)}[/yellow]"
        )

    if config.logging_level != "off" and (config.auto_export or result.failures):
        level = "verbose" if result.failures else config.logging_level
        folder = session.log.export(Path(config.log_dir), level)
        console.print(f"Diagnostics saved to {folder}")

    return session


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_file = str(Path(args.log_dir) / "voicenotes.log") if args.logging_level != "off" else None
    for name in LOGGER_NAMES:
        setup_logging(name, log_file=log_file, verbose=args.verbose)

    try:
        config = build_config(args)
        errors = config.validate()
        if errors:
            for error in errors:
                console.print(f"[red]Configuration error:[/red] {escape(error)}")
            return 1

        session = asyncio.run(transcribe_files(args.files, config))
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    transcript = render_transcript(session, config.display_format, fmt=args.format)
    if not transcript:
        console.print("[yellow]Nothing to export[/yellow]")
        return 0

    title = derive_title(session.raw_transcription)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(transcript + "\n", encoding="utf-8")
        console.print(f"[green]Saved[/green] {escape(repr(title))} -> {args.output}")
    else:
        console.print(f"[bold]{escape(title)}[/bold]")
        print(transcript)
    return 0


if __name__ == "__main__":
    sys.exit(main())
