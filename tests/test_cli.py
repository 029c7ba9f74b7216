import pytest

from voicenotes.transcript import TranscriptionError
from voicenotes.transcription import __main__ as cli


OUTPUTS = {
    "call-1.mp3": "[00:00:05] [Speaker 1] Hello there\n[Speaker 2] Hi",
    "call-2.mp3": None,
    "call-3.mp3": "[Speaker 1] Bye",
}


class FakeGemini:
    def __init__(self, config, session_log=None):
        self.config = config

    async def __call__(self, path):
        text = OUTPUTS[path.name]
        if text is None:
            raise TranscriptionError("Transcription returned empty.")
        return text


@pytest.fixture(autouse=True)
def fake_gemini(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(cli, "GeminiTranscriber", FakeGemini)


def test_batch_to_markdown_file(tmp_path):
    out = tmp_path / "out" / "transcript.md"
    files = [tmp_path / "call-3.mp3", tmp_path / "call-1.mp3", tmp_path / "call-2.mp3"]
    code = cli.main(
        [*map(str, files), "-o", str(out), "--format", "md",
         "--display-format", "timestamps_and_speakers", "--log-dir", str(tmp_path / "logs")]
    )
    assert code == 0
    assert out.read_text(encoding="utf-8").splitlines() == [
        "[00:05] **Speaker 1:** Hello there",
        "[00:05] **Speaker 2:** Hi",
        "[00:05] **Speaker 1:** Bye",
    ]


def test_failure_exports_verbose_diagnostics(tmp_path):
    log_dir = tmp_path / "logs"
    files = [tmp_path / "call-1.mp3", tmp_path / "call-2.mp3"]
    code = cli.main(
        [*map(str, files), "-o", str(tmp_path / "t.txt"),
         "--logging-level", "basic", "--log-dir", str(log_dir)]
    )
    assert code == 0
    (folder,) = [p for p in log_dir.iterdir() if p.is_dir()]
    assert (folder / "06-errors.json").exists()


def test_no_repair_keeps_raw_timestamps(tmp_path, capsys):
    code = cli.main(
        [str(tmp_path / "call-1.mp3"), "--no-repair-timestamps",
         "--display-format", "timestamps_and_speakers"]
    )
    assert code == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["[00:00:05] [Speaker 1] Hello there", "[Speaker 2] Hi"]


def test_invalid_config_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY")
    monkeypatch.delenv("API_KEY", raising=False)
    assert cli.main([str(tmp_path / "call-1.mp3")]) == 1


def test_default_level_keeps_diagnostics_for_failed_runs(tmp_path):
    files = [tmp_path / "call-1.mp3", tmp_path / "call-2.mp3"]
    code = cli.main([*map(str, files), "-o", str(tmp_path / "t.txt")])
    assert code == 0
    (folder,) = [p for p in (tmp_path / "logs").iterdir() if p.is_dir()]
    assert (folder / "06-errors.json").exists()
    assert (folder / "03-parsing-log.txt").exists()


def test_doc_export(tmp_path):
    out = tmp_path / "transcript.doc"
    code = cli.main([str(tmp_path / "call-3.mp3"), "-o", str(out), "--format", "doc"])
    assert code == 0
    assert '<span class="spk">Speaker 1:</span> Bye</p>' in out.read_text(encoding="utf-8")
