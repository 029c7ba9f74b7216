"""
Line classification for raw model transcripts.

The transcription model is asked to emit one turn per line in the form
`[mm:ss] [Speaker Name] text`. Real output drifts from that: timestamps go
missing, hours appear, or the line is plain prose. Every line is classified
into exactly one of three variants, tried in this order:

    FullMatch     [01:23] [Speaker 1] text
    SpeakerOnly   [Speaker 1] text
    Unrecognized  anything else (attributed to "Unknown")
"""

import re
from dataclasses import dataclass
from typing import Union

from .models import UNKNOWN_SPEAKER


TIMESTAMP_TOKEN = r"(?:\d{1,2}:)?\d{1,2}:\d{2}"

FULL_LINE_RE = re.compile(rf"^\s*\[({TIMESTAMP_TOKEN})\]\s*\[([^\]]+)\]\s*(.+)$")
SPEAKER_LINE_RE = re.compile(r"^\s*\[([^\]]+)\]\s*(.+)$")
_TIMESTAMP_ONLY_RE = re.compile(rf"^\s*{TIMESTAMP_TOKEN}\s*$")


@dataclass(frozen=True)
class FullMatch:
    raw_timestamp: str
    speaker_label: str
    text: str


@dataclass(frozen=True)
class SpeakerOnly:
    speaker_label: str
    text: str


@dataclass(frozen=True)
class Unrecognized:
    text: str
    speaker_label: str = UNKNOWN_SPEAKER


ParsedLine = Union[FullMatch, SpeakerOnly, Unrecognized]


def parse_line(line: str) -> ParsedLine:
    """
    Classify one raw transcript line.

    Args:
        line: A non-empty line of model output

    Returns:
        FullMatch, SpeakerOnly or Unrecognized. A bracketed label that is
        blank after trimming, or that holds only a timestamp, demotes the
        line to Unrecognized.
    """
    stripped = line.strip()

    match = FULL_LINE_RE.match(stripped)
    if match:
        speaker = match.group(2).strip()
        if speaker and not _TIMESTAMP_ONLY_RE.match(speaker):
            return FullMatch(
                raw_timestamp=match.group(1),
                speaker_label=speaker,
                text=match.group(3).strip(),
            )
        return Unrecognized(text=stripped)

    match = SPEAKER_LINE_RE.match(stripped)
    # "[00:05] text" carries a timestamp, not a speaker
    if match and not _TIMESTAMP_ONLY_RE.match(match.group(1)):
        speaker = match.group(1).strip()
        if speaker:
            return SpeakerOnly(speaker_label=speaker, text=match.group(2).strip())

    return Unrecognized(text=stripped)
