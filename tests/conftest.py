import pytest

from voicenotes.transcript import SegmentAssembler, TranscriptSession


@pytest.fixture
def session() -> TranscriptSession:
    return TranscriptSession(session_id="note_test")


@pytest.fixture
def assembler() -> SegmentAssembler:
    return SegmentAssembler(repair_timestamps=True)


def speaker_names(session: TranscriptSession) -> list[str]:
    return [session.speaker_for(segment).display_name for segment in session.segments]
