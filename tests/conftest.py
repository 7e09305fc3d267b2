from __future__ import annotations

import errno
import os
from pathlib import Path

import paramiko
import pytest

from remotefs.domain.files.client import ParamikoFileClient
from remotefs.domain.files.service import RemoteFileSession


class FakeSFTP:
    """
    Stand-in for paramiko.SFTPClient backed by a local directory.

    Remote paths are resolved under ``root``; errors are the same OSError
    subclasses paramiko raises for the matching SFTP status codes.
    """

    def __init__(self, root: Path):
        self.root = root
        self.closed = False
        self.calls = []

    def local(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def open(self, path, mode="r"):
        self.calls.append(("open", path, mode))
        if "b" not in mode:
            mode += "b"
        return open(self.local(path), mode)

    def stat(self, path):
        self.calls.append(("stat", path))
        return paramiko.SFTPAttributes.from_stat(os.stat(self.local(path)))

    def lstat(self, path):
        self.calls.append(("lstat", path))
        return paramiko.SFTPAttributes.from_stat(os.lstat(self.local(path)))

    def listdir_attr(self, path="."):
        self.calls.append(("listdir_attr", path))
        base = self.local(path)
        return [
            paramiko.SFTPAttributes.from_stat(os.lstat(base / name), name)
            for name in os.listdir(base)
        ]

    def mkdir(self, path, mode=0o777):
        self.calls.append(("mkdir", path))
        os.mkdir(self.local(path), mode)

    def remove(self, path):
        self.calls.append(("remove", path))
        os.remove(self.local(path))

    def rmdir(self, path):
        self.calls.append(("rmdir", path))
        os.rmdir(self.local(path))

    def rename(self, oldpath, newpath):
        # SFTPv3 rename refuses an existing target
        self.calls.append(("rename", oldpath, newpath))
        if self.local(newpath).exists():
            raise OSError(errno.EEXIST, "Failure")
        os.rename(self.local(oldpath), self.local(newpath))

    def posix_rename(self, oldpath, newpath):
        self.calls.append(("posix_rename", oldpath, newpath))
        os.replace(self.local(oldpath), self.local(newpath))

    def close(self):
        self.closed = True


@pytest.fixture
def remote_root(tmp_path) -> Path:
    root = tmp_path / "remote"
    root.mkdir()
    return root


@pytest.fixture
def fake_sftp(remote_root) -> FakeSFTP:
    return FakeSFTP(remote_root)


@pytest.fixture
def session(fake_sftp) -> RemoteFileSession:
    s = RemoteFileSession(ParamikoFileClient(fake_sftp))
    yield s
    s.close()


@pytest.fixture
def local_dir(tmp_path) -> Path:
    d = tmp_path / "local"
    d.mkdir()
    return d
