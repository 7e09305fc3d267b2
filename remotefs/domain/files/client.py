"""
paramiko-backed protocol client
"""
import errno
import posixpath
import stat
from typing import BinaryIO, List

import paramiko

from ...core.interfaces import FileTransferClient
from ...core.logging import get_logger
from .models import FileInfo

logger = get_logger(__name__)


class ParamikoFileClient(FileTransferClient):
    """
    FileTransferClient over a ``paramiko.SFTPClient``.
    
    paramiko already maps SFTP status codes to OSError subclasses
    (SSH_FX_NO_SUCH_FILE becomes FileNotFoundError), so errors pass
    through untouched. The recursive helpers are built from single
    requests since SFTP v3 has neither ``mkdir -p`` nor ``rm -r``.
    """
    
    def __init__(self, sftp: paramiko.SFTPClient):
        self.sftp = sftp
    
    # --------------------
    # File handles
    # --------------------
    def open_read(self, path: str) -> BinaryIO:
        return self.sftp.open(path, "rb")
    
    def create(self, path: str) -> BinaryIO:
        return self.sftp.open(path, "wb")
    
    def open_append(self, path: str) -> BinaryIO:
        """
        Open an existing file positioned at its end.
        
        paramiko's "a" mode adds SSH_FXF_CREAT, which would create a missing
        file. "r+" maps to SSH_FXF_READ|SSH_FXF_WRITE without CREAT, so the
        server answers not-found instead; the handle is then moved to EOF.
        """
        handle = self.sftp.open(path, "r+b")
        try:
            handle.seek(0, 2)
        except Exception:
            handle.close()
            raise
        return handle
    
    # --------------------
    # Metadata
    # --------------------
    def stat(self, path: str) -> FileInfo:
        attrs = self.sftp.stat(path)
        return FileInfo.from_attributes(attrs, name=posixpath.basename(path.rstrip("/")) or path)
    
    def listdir(self, path: str) -> List[FileInfo]:
        entries = [FileInfo.from_attributes(attrs) for attrs in self.sftp.listdir_attr(path)]
        return sorted(entries, key=lambda info: info.name)
    
    # --------------------
    # Directories
    # --------------------
    def mkdir_all(self, path: str) -> None:
        """Create ``path`` and missing parents; existing directories are fine"""
        try:
            attrs = self.sftp.stat(path)
        except FileNotFoundError:
            pass
        else:
            if stat.S_ISDIR(attrs.st_mode or 0):
                return
            raise NotADirectoryError(errno.ENOTDIR, "not a directory", path)
        
        parent = posixpath.dirname(path.rstrip("/"))
        if parent and parent != path:
            self.mkdir_all(parent)
        
        try:
            self.sftp.mkdir(path)
        except OSError:
            # Someone else may have created it in between
            try:
                attrs = self.sftp.stat(path)
            except OSError:
                attrs = None
            if attrs is None or not stat.S_ISDIR(attrs.st_mode or 0):
                raise
    
    def remove(self, path: str) -> None:
        self.sftp.remove(path)
    
    def rmdir(self, path: str) -> None:
        self.sftp.rmdir(path)
    
    def remove_all(self, path: str) -> None:
        """
        Depth-first removal; symlinks are removed, never followed.
        
        Stops at the first failure, leaving whatever was not yet removed.
        """
        attrs = self.sftp.lstat(path)
        if not stat.S_ISDIR(attrs.st_mode or 0):
            self.sftp.remove(path)
            return
        
        for entry in self.sftp.listdir_attr(path):
            if entry.filename in (".", ".."):
                continue
            child = posixpath.join(path, entry.filename)
            if stat.S_ISDIR(entry.st_mode or 0):
                self.remove_all(child)
            else:
                self.sftp.remove(child)
        self.sftp.rmdir(path)
    
    def rename(self, old_path: str, new_path: str, overwrite: bool = False) -> None:
        if overwrite:
            self.sftp.posix_rename(old_path, new_path)
        else:
            self.sftp.rename(old_path, new_path)
    
    def close(self) -> None:
        logger.debug("Closing SFTP client")
        self.sftp.close()
