"""
Sequential batch processing of split recordings.

A long recording is often uploaded as numbered parts (`meeting-1.mp3`,
`meeting-2.mp3`, ...). Parts are transcribed one at a time, in order, and all
of them are assembled into the same TranscriptSession so timestamps and
speakers carry over. A failing part is reported and skipped; it never throws
away what earlier parts produced.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

from voicenotes.logger import log_function
from voicenotes.transcript import SegmentAssembler, TranscriptSession


BATCH_PART_RE = re.compile(r"-(\d+)\.\w+$")

Transcriber = Callable[[Any], Awaitable[str]]
ProgressCallback = Callable[[int, int], None]
StatusCallback = Callable[[str], None]


@dataclass
class UnitFailure:
    index: int  # 1-based position in the batch
    name: str
    message: str


@dataclass
class BatchResult:
    """Outcome of a batch run. The status is always "complete"."""

    total: int
    processed: int = 0
    segments_added: int = 0
    failures: list[UnitFailure] = field(default_factory=list)
    status: str = "complete"


def unit_name(unit: Any) -> str:
    if isinstance(unit, Path):
        return unit.name
    return str(getattr(unit, "name", unit))


def is_batch(paths: Sequence[Path]) -> bool:
    """True when there are several files and all carry a `-<n>.<ext>` suffix."""
    return len(paths) > 1 and all(BATCH_PART_RE.search(Path(p).name) for p in paths)


@log_function(logger_name="pipeline")
def plan_units(paths: Sequence[Path]) -> list[Path]:
    """
    Decide which files to process, in which order.

    Numbered parts are sorted by part number. Anything else is single-file
    mode: only the first file is processed.

    Args:
        paths: Files as given by the user

    Returns:
        Ordered list of files to transcribe
    """
    logger = logging.getLogger("pipeline")
    paths = [Path(p) for p in paths]
    if not paths:
        return []
    if is_batch(paths):
        ordered = sorted(
            paths, key=lambda p: int(BATCH_PART_RE.search(p.name).group(1))
        )
        logger.info(f"Batch of {len(ordered)} parts: {[p.name for p in ordered]}")
        return ordered
    if len(paths) > 1:
        logger.warning(
            f"Files are not numbered parts (name-<n>.ext); processing only {paths[0].name}"
        )
    return paths[:1]


class BatchSessionController:
    """Feeds units through a transcriber and the assembler, one at a time."""

    def __init__(
        self,
        transcriber: Transcriber,
        assembler: SegmentAssembler,
        on_progress: Optional[ProgressCallback] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.transcriber = transcriber
        self.assembler = assembler
        self.on_progress = on_progress
        self.on_status = on_status
        self._running = False

    def _status(self, message: str) -> None:
        if self.on_status is None:
            return
        try:
            self.on_status(message)
        except Exception as e:
            logging.getLogger("pipeline").warning(f"Status callback failed: {e}")

    def _progress(self, completed: int, total: int) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(completed, total)
        except Exception as e:
            logging.getLogger("pipeline").warning(f"Progress callback failed: {e}")

    @log_function(logger_name="pipeline", log_execution_time=True)
    async def run(
        self, session: TranscriptSession, units: Sequence[Any]
    ) -> BatchResult:
        """
        Transcribe and assemble every unit into the session, in order.

        Args:
            session: Session shared by all units
            units: Ordered source units handed to the transcriber

        Returns:
            BatchResult listing processed units and skipped failures

        Raises:
            RuntimeError: If this controller is already running a batch
        """
        if self._running:
            raise RuntimeError("A batch is already running on this controller")
        self._running = True
        try:
            return await self._run_units(session, units)
        finally:
            self._running = False

    async def _run_units(
        self, session: TranscriptSession, units: Sequence[Any]
    ) -> BatchResult:
        logger = logging.getLogger("pipeline")
        total = len(units)
        result = BatchResult(total=total)
        self._progress(0, total)

        for index, unit in enumerate(units, 1):
            name = unit_name(unit)
            self._status(f'Processing file {index} of {total}: "{name}"...')
            try:
                raw_text = await self.transcriber(unit)
                session.log.save_raw_response(raw_text)
                created = self.assembler.process(session, raw_text)
            except Exception as e:
                logger.error(f"Unit {index} ({name}) failed: {e}")
                session.log.save_error("BATCH_PART_FAILURE", e, request_id=name)
                result.failures.append(UnitFailure(index, name, str(e)))
                self._status(f"Error on file {index}: {e}. Skipping.")
                continue

            result.processed += 1
            result.segments_added += len(created)
            self._progress(index, total)

        session.log.save_metrics(
            {
                "units": total,
                "unitsProcessed": result.processed,
                "unitsFailed": len(result.failures),
                "segments": len(session.segments),
            }
        )
        self._status("Batch transcription complete.")
        logger.info(
            f"Batch complete: {result.processed}/{total} units, "
            f"{len(result.failures)} skipped"
        )
        return result
