from __future__ import annotations

from remotefs.core.exceptions import RemoteIOError
from remotefs.core.interfaces import ErrorReporter
from remotefs.domain.files.walkthrough import run_walkthrough


class ListReporter(ErrorReporter):
    def __init__(self):
        self.reports = []

    def report(self, operation, error):
        self.reports.append(operation)


def test_walkthrough_runs_every_step(session, local_dir, remote_root):
    src = local_dir / "local_file.txt"
    src.write_bytes(b"upload me")
    lines = []

    result = run_walkthrough(session, base_dir="/test", local_file=src, echo=lines.append)

    assert result.ok
    assert result.failed == []
    assert result.completed == [
        "create directory",
        "create file",
        "upload file",
        "write file",
        "read file",
        "list directory",
        "append to file",
        "rename file",
        "delete file",
        "delete directory",
    ]
    assert "File content: Hello, SFTP!" in lines
    assert "  uploaded_file.txt (9 bytes)" in lines
    assert not (remote_root / "test").exists()


def test_walkthrough_skips_upload_without_local_file(session):
    result = run_walkthrough(session, base_dir="/scratch", echo=lambda line: None)

    assert result.ok
    assert result.skipped == ["upload file"]


def test_walkthrough_continues_after_failures(session, monkeypatch, remote_root):
    def broken_append(path, content):
        raise RemoteIOError("failed to open file for appending: Failure", path)

    monkeypatch.setattr(session, "append_to_file", broken_append)
    reporter = ListReporter()

    result = run_walkthrough(session, base_dir="/test", reporter=reporter, echo=lambda line: None)

    assert not result.ok
    assert result.failed == ["append to file"]
    assert reporter.reports == ["append to file"]
    assert "delete directory" in result.completed
    assert not (remote_root / "test").exists()
