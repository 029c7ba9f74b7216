"""Plain-text, markdown and word-processor rendering of a transcript session."""

import html
import re

from .session import TranscriptSession


DISPLAY_FORMATS = ("speakers_only", "timestamps_and_speakers", "plain")
OUTPUT_FORMATS = ("txt", "md", "doc")
UNTITLED = "Untitled Note"

DOC_STYLES = (
    "body { font-family: sans-serif; font-size: 11pt; } "
    "p { margin: 0 0 5px 0; } .ts { color: #555; } .spk { font-weight: bold; }"
)

_LEADING_TOKEN_RE = re.compile(r"^\s*\[[^\]]+\]\s*")
_LEADING_DECORATION_RE = re.compile(r"^[*_`#\->\s\[\]().\d]+")
_TRAILING_DECORATION_RE = re.compile(r"[*_`#]+$")


def render_transcript(
    session: TranscriptSession,
    display_format: str = "speakers_only",
    fmt: str = "txt",
) -> str:
    """
    Render every segment of the session as one line, in order.

    Speaker names are looked up on each call, so renames always show.

    Args:
        session: Session to render
        display_format: "speakers_only", "timestamps_and_speakers" or "plain"
        fmt: "txt" ("[Name] text"), "md" ("**Name:** text") or "doc"
            (one HTML paragraph per segment, see `render_transcript_doc`)

    Returns:
        Newline-joined transcript, empty string when there are no segments
    """
    if display_format not in DISPLAY_FORMATS:
        raise ValueError(f"Unknown display format: {display_format!r}")
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {fmt!r}")
    if fmt == "doc":
        return render_transcript_doc(session, display_format)

    lines = []
    for segment in session.segments:
        speaker = session.speaker_for(segment)
        label = (
            f"**{speaker.display_name}:** " if fmt == "md" else f"[{speaker.display_name}] "
        )
        line = ""
        if display_format == "timestamps_and_speakers":
            if segment.timestamp:
                line += f"[{segment.timestamp}] "
            line += label
        elif display_format == "speakers_only":
            line += label
        lines.append(line + segment.text)
    return "\n".join(lines)


def render_transcript_doc(
    session: TranscriptSession, display_format: str = "speakers_only"
) -> str:
    """
    Render the session as a standalone HTML document that word processors
    open directly (saved with a .doc extension).

    Returns:
        HTML string, empty string when there are no segments
    """
    if not session.segments:
        return ""

    paragraphs = []
    for segment in session.segments:
        name = html.escape(session.speaker_for(segment).display_name)
        line = "<p>"
        if display_format == "timestamps_and_speakers" and segment.timestamp:
            line += f'<span class="ts">[{segment.timestamp}]</span> '
        if display_format in ("timestamps_and_speakers", "speakers_only"):
            line += f'<span class="spk">{name}:</span> '
        paragraphs.append(line + html.escape(segment.text, quote=False) + "</p>")

    return (
        '<!DOCTYPE html><html><head><meta charset="UTF-8">'
        f"<style>{DOC_STYLES}</style></head>"
        f"<body>{''.join(paragraphs)}</body></html>"
    )


def derive_title(raw_text: str, max_length: int = 60) -> str:
    """Pick a note title from the first meaningful line of raw model output."""
    for raw_line in raw_text.splitlines():
        line = _LEADING_TOKEN_RE.sub("", raw_line, count=1).strip()
        if len(line) <= 3:
            continue
        title = _LEADING_DECORATION_RE.sub("", line)
        title = _TRAILING_DECORATION_RE.sub("", title).strip()
        if not title:
            return UNTITLED
        if len(title) > max_length:
            return title[:max_length] + "..."
        return title
    return UNTITLED
