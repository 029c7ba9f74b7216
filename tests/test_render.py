import pytest

from voicenotes.transcript import derive_title, render_transcript
from voicenotes.transcript.render import render_transcript_doc


@pytest.fixture
def filled(session, assembler):
    assembler.process(session, "[00:01] [Host] Hello <world>\n[Guest] Hi\nno speaker")
    return session


def test_speakers_only_txt(filled):
    assert render_transcript(filled) == "[Host] Hello <world>\n[Guest] Hi\n[Unknown] no speaker"


def test_timestamps_and_speakers_md(filled):
    text = render_transcript(filled, "timestamps_and_speakers", fmt="md")
    assert text.splitlines() == [
        "[00:01] **Host:** Hello <world>",
        "[00:01] **Guest:** Hi",
        "[00:01] **Unknown:** no speaker",
    ]


def test_missing_timestamp_is_omitted(session, assembler):
    assembler.process(session, "[Host] first")
    assert render_transcript(session, "timestamps_and_speakers") == "[Host] first"


def test_plain_keeps_text_only(filled):
    assert render_transcript(filled, "plain", fmt="md") == "Hello <world>\nHi\nno speaker"


def test_one_line_per_segment_and_rename_visible(filled):
    host_id = filled.segments[0].speaker_id
    filled.rename_speaker(host_id, "Dana")
    lines = render_transcript(filled).splitlines()
    assert len(lines) == len(filled.segments)
    assert lines[0] == "[Dana] Hello <world>"


def test_empty_session_renders_empty(session):
    assert render_transcript(session) == ""


def test_unknown_formats_raise(filled):
    with pytest.raises(ValueError):
        render_transcript(filled, "fancy")
    with pytest.raises(ValueError):
        render_transcript(filled, fmt="docx")


def test_title_from_first_meaningful_line():
    raw = "[00:01] ok\n[00:02] ## Quarterly planning review **"
    assert derive_title(raw) == "Quarterly planning review"


def test_title_strips_leading_token_and_decoration():
    assert derive_title("[Speaker 1] **Welcome to the show**") == "Welcome to the show"


def test_title_is_truncated():
    title = derive_title("[A] " + "x" * 80)
    assert title == "x" * 60 + "..."


def test_title_fallback():
    assert derive_title("") == "Untitled Note"
    assert derive_title("[A] hi\n[B] ok") == "Untitled Note"


def test_doc_output_is_html_with_escaped_text(filled):
    doc = render_transcript(filled, "timestamps_and_speakers", fmt="doc")
    assert doc.startswith("<!DOCTYPE html>")
    assert doc.endswith("</body></html>")
    assert (
        '<p><span class="ts">[00:01]</span> <span class="spk">Host:</span> '
        "Hello &lt;world&gt;</p>"
    ) in doc
    assert doc.count("<p>") == 3


def test_doc_plain_has_no_speaker_spans(filled):
    doc = render_transcript_doc(filled, "plain")
    assert 'class="spk"' not in doc
    assert "<p>Hi</p>" in doc


def test_doc_of_empty_session_is_empty(session):
    assert render_transcript(session, fmt="doc") == ""
