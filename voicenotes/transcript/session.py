"""
Explicit transcript session state.

A TranscriptSession owns everything that must persist between assembler
calls within one note: the speaker registry, the remembered timestamp and the
append-only segment list. Starting a new note means creating a new session.
"""

import uuid
from typing import Iterable, Optional

from voicenotes.logger import SessionLog
from .models import Speaker, SpeakerSeed, TranscriptSegment
from .speakers import SpeakerRegistry
from .timestamps import TimestampState


class TranscriptSession:
    def __init__(
        self,
        seeds: Optional[Iterable[SpeakerSeed]] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or f"note_{uuid.uuid4().hex}"
        self.registry = SpeakerRegistry(seeds)
        self.timestamps = TimestampState()
        self.segments: list[TranscriptSegment] = []
        self.raw_transcription = ""
        self.log = SessionLog(self.id)
        self._segment_count = 0

    def next_segment_id(self) -> str:
        segment_id = f"segment_{self._segment_count}"
        self._segment_count += 1
        return segment_id

    def append_raw(self, raw_text: str) -> None:
        """Accumulate one unit's raw model output, newline separated."""
        if self.raw_transcription:
            self.raw_transcription += "\n"
        self.raw_transcription += raw_text

    def speaker_for(self, segment: TranscriptSegment) -> Speaker:
        """Look up the segment's speaker by id; always reflects renames."""
        speaker = self.registry.get(segment.speaker_id)
        if speaker is None:
            raise KeyError(f"Segment {segment.id} references unknown speaker {segment.speaker_id}")
        return speaker

    def rename_speaker(self, speaker_id: str, new_name: str) -> bool:
        """Rename a speaker; returns True when the name changed."""
        speaker = self.registry.get(speaker_id)
        old_name = speaker.display_name if speaker else None
        renamed = self.registry.rename(speaker_id, new_name)
        if renamed:
            count = sum(1 for s in self.segments if s.speaker_id == speaker_id)
            self.log.log(
                "SPEAKERS",
                f"Renamed {old_name!r} to {new_name.strip()!r} ({count} segments)",
            )
        return renamed
