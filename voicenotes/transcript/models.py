"""
Core value types of the transcript engine.

Speaker records are mutable (display names change on rename); segments are
immutable and point at their speaker by id only, so a rename is visible on the
next render without touching any segment.
"""

from dataclasses import dataclass
from typing import Optional


UNKNOWN_SPEAKER = "Unknown"


@dataclass
class Speaker:
    """A speaker observed in a session.

    Attributes:
        id: Stable identifier, never changes after creation
        display_name: Current name, unique among registered speakers
        hints: Free-text description (voice, role)
        color: Display color, assigned once at creation
    """

    id: str
    display_name: str
    hints: str = ""
    color: str = ""


@dataclass(frozen=True)
class SpeakerSeed:
    """Pre-populated speaker metadata from an external settings store."""

    display_name: str
    hints: str = ""
    color: Optional[str] = None


@dataclass(frozen=True)
class TranscriptSegment:
    """One attributed, optionally timestamped unit of transcript text."""

    id: str
    speaker_id: str
    text: str
    timestamp: Optional[str] = None
