import asyncio
from pathlib import Path

import pytest

from voicenotes.pipeline import BatchSessionController, is_batch, plan_units
from voicenotes.transcript import SegmentAssembler, TranscriptionError, TranscriptSession

from conftest import speaker_names


class FakeTranscriber:
    """Returns canned text per unit; raises for units mapped to an exception."""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    async def __call__(self, unit):
        self.calls.append(unit)
        await asyncio.sleep(0)
        result = self.outputs[unit]
        if isinstance(result, Exception):
            raise result
        return result


def run_batch(outputs, units=None, **kwargs):
    session = TranscriptSession()
    transcriber = FakeTranscriber(outputs)
    controller = BatchSessionController(
        transcriber, SegmentAssembler(repair_timestamps=True), **kwargs
    )
    result = asyncio.run(controller.run(session, list(units or outputs)))
    return session, result, transcriber


def test_speaker_continuity_across_units():
    session, result, _ = run_batch(
        {"part-1.mp3": "[Speaker 1] Hi", "part-2.mp3": "[Speaker 1] Bye"}
    )
    first, second = session.segments
    assert first.speaker_id == second.speaker_id
    assert result.processed == 2
    assert result.status == "complete"


def test_units_processed_in_order_and_concatenated():
    outputs = {
        "a": "[00:01] [A] one\n[B] two",
        "b": "three\n\n[00:40] [A] four",
        "c": "[C] five",
    }
    session, result, transcriber = run_batch(outputs, units=["a", "b", "c"])
    assert transcriber.calls == ["a", "b", "c"]
    assert [s.text for s in session.segments] == ["one", "two", "three", "four", "five"]
    assert [s.timestamp for s in session.segments] == ["00:01", "00:01", "00:01", "00:40", "00:40"]
    assert result.segments_added == 5


def test_failed_unit_is_skipped_and_batch_completes():
    outputs = {
        "p1": "[00:10] [Speaker 1] kept",
        "p2": TranscriptionError("Transcription returned empty."),
        "p3": "[Speaker 1] also kept",
    }
    statuses = []
    session, result, transcriber = run_batch(
        outputs, units=["p1", "p2", "p3"], on_status=statuses.append
    )
    assert transcriber.calls == ["p1", "p2", "p3"]
    assert [s.text for s in session.segments] == ["kept", "also kept"]
    assert session.segments[1].timestamp == "00:10"
    assert result.status == "complete"
    assert result.processed == 2
    assert [(f.index, f.name) for f in result.failures] == [(2, "p2")]
    assert "Error on file 2: Transcription returned empty.. Skipping." in statuses
    assert statuses[-1] == "Batch transcription complete."
    assert session.log.errors[0]["type"] == "BATCH_PART_FAILURE"
    assert session.log.errors[0]["requestId"] == "p2"


def test_all_units_failing_still_completes():
    session, result, _ = run_batch({"x": RuntimeError("boom"), "y": OSError("gone")})
    assert result.status == "complete"
    assert result.processed == 0
    assert len(result.failures) == 2
    assert session.segments == []


def test_segment_count_matches_non_empty_lines_of_successful_units():
    outputs = {
        "1": "a\n\nb\n[X] c",
        "2": ValueError("bad"),
        "3": "\n\n[00:01] [Y] d\n",
    }
    session, _, _ = run_batch(outputs, units=["1", "2", "3"])
    assert len(session.segments) == 4


def test_progress_reported_for_successful_units():
    progress = []
    run_batch(
        {"a": "[A] x", "b": RuntimeError("no"), "c": "[A] y"},
        units=["a", "b", "c"],
        on_progress=lambda done, total: progress.append((done, total)),
    )
    assert progress == [(0, 3), (1, 3), (3, 3)]


def test_existing_session_segments_survive_a_later_batch():
    session = TranscriptSession()
    assembler = SegmentAssembler()
    assembler.process(session, "[00:01] [Host] intro")
    controller = BatchSessionController(
        FakeTranscriber({"p": RuntimeError("down"), "q": "[Host] more"}), assembler
    )
    asyncio.run(controller.run(session, ["p", "q"]))
    assert speaker_names(session) == ["Host", "Host"]
    assert session.segments[1].timestamp == "00:01"


def test_controller_refuses_overlapping_runs():
    gate = asyncio.Event()

    class SlowTranscriber:
        async def __call__(self, unit):
            await gate.wait()
            return "[A] done"

    async def scenario():
        session = TranscriptSession()
        controller = BatchSessionController(SlowTranscriber(), SegmentAssembler())
        first = asyncio.create_task(controller.run(session, ["u"]))
        await asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            await controller.run(TranscriptSession(), ["v"])
        gate.set()
        result = await first
        return session, result

    session, result = asyncio.run(scenario())
    assert result.processed == 1
    assert [s.text for s in session.segments] == ["done"]


def test_plan_units_sorts_numbered_parts():
    paths = [Path("talk-10.mp3"), Path("talk-2.mp3"), Path("talk-1.m4a")]
    assert is_batch(paths)
    assert plan_units(paths) == [Path("talk-1.m4a"), Path("talk-2.mp3"), Path("talk-10.mp3")]


def test_plan_units_single_file_mode():
    paths = [Path("meeting.mp3"), Path("other-2.mp3")]
    assert not is_batch(paths)
    assert plan_units(paths) == [Path("meeting.mp3")]
    assert plan_units([Path("solo-3.mp3")]) == [Path("solo-3.mp3")]
    assert plan_units([]) == []


def test_raising_progress_hook_does_not_abort_the_batch():
    def on_progress(done, total):
        if done == 1:
            raise RuntimeError("ui gone")

    statuses = []
    session, result, transcriber = run_batch(
        {"a": "[A] one", "b": "[A] two", "c": "[A] three"},
        units=["a", "b", "c"],
        on_progress=on_progress,
        on_status=statuses.append,
    )
    assert transcriber.calls == ["a", "b", "c"]
    assert [s.text for s in session.segments] == ["one", "two", "three"]
    assert result.processed == 3
    assert statuses[-1] == "Batch transcription complete."
    assert session.log.metrics["unitsProcessed"] == 3


def test_raising_status_hook_does_not_abort_the_batch():
    def on_status(message):
        raise ValueError("closed")

    session, result, _ = run_batch(
        {"a": "[A] one", "b": RuntimeError("no"), "c": "[A] two"},
        units=["a", "b", "c"],
        on_status=on_status,
    )
    assert result.status == "complete"
    assert result.processed == 2
    assert [f.name for f in result.failures] == ["b"]


def test_controller_is_reusable_after_a_raising_start_hook():
    calls = []

    def on_progress(done, total):
        calls.append(done)
        if len(calls) == 1:
            raise RuntimeError("first call fails")

    controller = BatchSessionController(
        FakeTranscriber({"u": "[A] x", "v": "[A] y"}),
        SegmentAssembler(),
        on_progress=on_progress,
    )
    first = asyncio.run(controller.run(TranscriptSession(), ["u"]))
    second = asyncio.run(controller.run(TranscriptSession(), ["v"]))
    assert first.processed == 1
    assert second.processed == 1
