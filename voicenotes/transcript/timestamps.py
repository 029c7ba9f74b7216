"""Timestamp canonicalization and inheritance across a parse pass."""

from dataclasses import dataclass
from typing import Optional

from .line_parser import FullMatch, ParsedLine, SpeakerOnly, Unrecognized


@dataclass
class TimestampState:
    """Last canonical timestamp seen in the session, if any."""

    last_good: Optional[str] = None


def canonicalize_timestamp(raw: str) -> str:
    """
    Convert `H:MM:SS`, `HH:MM:SS`, `M:SS` or `MM:SS` to zero-padded `mm:ss`.

    Hours are folded into minutes, so "01:23:45" becomes "83:45".

    Raises:
        ValueError: If the token is not 2 or 3 colon-separated integers
    """
    parts = [int(part) for part in raw.strip().split(":")]
    if len(parts) == 3:
        hours, minutes, seconds = parts
        minutes += hours * 60
    elif len(parts) == 2:
        minutes, seconds = parts
    else:
        raise ValueError(f"Not a timestamp token: {raw!r}")
    return f"{minutes:02d}:{seconds:02d}"


def normalize_timestamp(
    parsed: ParsedLine, state: TimestampState, repair: bool
) -> Optional[str]:
    """
    Resolve the timestamp for one parsed line.

    Without repair the raw token is passed through and nothing is inherited.
    With repair, a FullMatch token is canonicalized and remembered; lines
    without a token reuse the remembered value, or get none.
    """
    if isinstance(parsed, FullMatch):
        if not repair:
            return parsed.raw_timestamp
        state.last_good = canonicalize_timestamp(parsed.raw_timestamp)
        return state.last_good
    if isinstance(parsed, (SpeakerOnly, Unrecognized)):
        return state.last_good if repair else None
    raise TypeError(f"Unhandled line variant: {type(parsed).__name__}")
