"""
Turn raw model output into speaker-attributed transcript segments.

Each call appends to the session it is given. Speaker identity and the
remembered timestamp live on the session, so calling `process` once per batch
unit keeps "Speaker 1" in part two bound to "Speaker 1" from part one.
"""

import logging

from voicenotes.logger import log_function
from .line_parser import FullMatch, SpeakerOnly, Unrecognized, parse_line
from .models import TranscriptSegment
from .session import TranscriptSession
from .timestamps import normalize_timestamp


class SegmentAssembler:
    """Builds segments from raw text against a TranscriptSession.

    Attributes:
        repair_timestamps: Canonicalize and inherit timestamps. Read once per
            `process` call.
    """

    def __init__(self, repair_timestamps: bool = True):
        self.repair_timestamps = repair_timestamps

    @log_function(logger_name="assembler", log_execution_time=True)
    def process(self, session: TranscriptSession, raw_text: str) -> list[TranscriptSegment]:
        """
        Parse raw text and append the resulting segments to the session.

        Args:
            session: Session whose registry, timestamp state and segments are used
            raw_text: Line-oriented model output

        Returns:
            The segments created by this call, in input order
        """
        logger = logging.getLogger("assembler")
        repair = self.repair_timestamps

        session.append_raw(raw_text)
        session.log.log(
            "PARSING", f"Starting post-processing on {len(raw_text)} chars."
        )

        lines = [line.strip() for line in raw_text.splitlines()]
        lines = [line for line in lines if line]

        created: list[TranscriptSegment] = []
        for index, line in enumerate(lines, 1):
            parsed = parse_line(line)
            timestamp = normalize_timestamp(parsed, session.timestamps, repair)

            if isinstance(parsed, SpeakerOnly):
                if repair:
                    session.log.save_parsing_log(
                        f"Line {index}: Inherited timestamp '{timestamp}'"
                    )
            elif isinstance(parsed, Unrecognized):
                session.log.save_parsing_log(
                    f"Line {index}: Failed to match schema. "
                    f"Treating as text for '{parsed.speaker_label}'."
                )
            elif not isinstance(parsed, FullMatch):
                raise TypeError(f"Unhandled line variant: {type(parsed).__name__}")

            speaker = session.registry.resolve(parsed.speaker_label)
            segment = TranscriptSegment(
                id=session.next_segment_id(),
                speaker_id=speaker.id,
                text=parsed.text,
                timestamp=timestamp,
            )
            session.segments.append(segment)
            created.append(segment)

        logger.info(f"Assembled {len(created)} segments from {len(lines)} lines")
        session.log.log(
            "PARSING", f"Post-processing complete. Found {len(created)} segments."
        )
        return created
