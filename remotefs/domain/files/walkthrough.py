"""
Scripted tour of every session operation
"""
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from ...core.constants import (
    WALKTHROUGH_APPENDIX,
    WALKTHROUGH_BASE_DIR,
    WALKTHROUGH_GREETING,
)
from ...core.exceptions import RemoteFSError
from ...core.interfaces import ErrorReporter, LoggingReporter
from .service import RemoteFileSession


@dataclass
class WalkthroughResult:
    """Outcome of a walkthrough run"""
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def run_walkthrough(
    session: RemoteFileSession,
    base_dir: str = WALKTHROUGH_BASE_DIR,
    local_file: Optional[Union[str, Path]] = None,
    reporter: Optional[ErrorReporter] = None,
    echo: Callable[[str], None] = print,
) -> WalkthroughResult:
    """
    Create, read, update and delete files under ``base_dir``.
    
    Each step runs regardless of earlier failures; errors go to
    ``reporter`` and are collected in the result instead of raised.
    
    Args:
        session: Connected session
        base_dir: Remote scratch directory, removed at the end
        local_file: Optional file uploaded as ``uploaded_file.txt``
        reporter: Error sink (defaults to logging)
        echo: Output function for progress lines
    
    Returns:
        WalkthroughResult
    """
    reporter = reporter or LoggingReporter()
    result = WalkthroughResult()

    new_dir = posixpath.join(base_dir, "newdir")
    new_file = posixpath.join(base_dir, "newfile.txt")
    uploaded = posixpath.join(base_dir, "uploaded_file.txt")
    renamed = posixpath.join(base_dir, "renamed_file.txt")

    def step(name: str, action: Callable[[], object], done: Optional[str] = None):
        try:
            value = action()
        except RemoteFSError as e:
            reporter.report(name, e)
            result.failed.append(name)
            return None
        result.completed.append(name)
        if done:
            echo(done)
        return value

    echo("=== CREATE OPERATIONS ===")
    step("create directory", lambda: session.create_directory(new_dir), "Directory created")
    step("create file", lambda: session.create_file(new_file), "File created")
    if local_file is not None:
        step("upload file", lambda: session.upload_file(local_file, uploaded), "File uploaded")
    else:
        result.skipped.append("upload file")

    echo("\n=== READ OPERATIONS ===")
    step("write file", lambda: session.update_file(new_file, WALKTHROUGH_GREETING))
    content = step("read file", lambda: session.read_file_content(new_file))
    if content is not None:
        echo(f"File content: {content.decode('utf-8', errors='replace')}")

    entries = step("list directory", lambda: session.list_directory(base_dir))
    if entries is not None:
        echo("Files in directory:")
        for entry in entries:
            echo(f"  {entry.name} ({entry.size} bytes)")

    echo("\n=== UPDATE OPERATIONS ===")
    step("append to file", lambda: session.append_to_file(new_file, WALKTHROUGH_APPENDIX), "Text appended to file")
    step("rename file", lambda: session.rename_file(new_file, renamed), "File renamed")

    echo("\n=== DELETE OPERATIONS ===")
    step("delete file", lambda: session.delete_file(renamed), "File deleted")
    step("delete directory", lambda: session.delete_directory_recursive(base_dir), "Directory deleted")

    return result
