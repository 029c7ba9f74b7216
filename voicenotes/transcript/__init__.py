"""
Transcript post-processing engine.

Turns raw `[mm:ss] [Speaker] text` model output into ordered, speaker
attributed segments while keeping speaker identity stable across calls:
    line_parser   classify one raw line
    timestamps    canonicalize or inherit timestamps
    speakers      session-scoped speaker registry
    assembler     raw text -> segments appended to a session
    render        text, markdown and word-processor output, note titles
"""

from .assembler import SegmentAssembler
from .errors import (
    SpeakerNameCollisionError,
    TranscriptEngineError,
    TranscriptionError,
)
from .line_parser import FullMatch, SpeakerOnly, Unrecognized, parse_line
from .models import UNKNOWN_SPEAKER, Speaker, SpeakerSeed, TranscriptSegment
from .render import DISPLAY_FORMATS, OUTPUT_FORMATS, derive_title, render_transcript
from .session import TranscriptSession
from .speakers import PALETTE, SpeakerRegistry, color_for_index
from .timestamps import TimestampState, canonicalize_timestamp, normalize_timestamp

__all__ = [
    # Engine
    "SegmentAssembler",
    "TranscriptSession",
    "SpeakerRegistry",
    "parse_line",
    "normalize_timestamp",
    "canonicalize_timestamp",
    "render_transcript",
    "derive_title",
    # Types
    "FullMatch",
    "SpeakerOnly",
    "Unrecognized",
    "Speaker",
    "SpeakerSeed",
    "TranscriptSegment",
    "TimestampState",
    "UNKNOWN_SPEAKER",
    "PALETTE",
    "DISPLAY_FORMATS",
    "OUTPUT_FORMATS",
    "color_for_index",
    # Errors
    "TranscriptEngineError",
    "SpeakerNameCollisionError",
    "TranscriptionError",
]
