"""
Remote file session facade
"""
from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

import paramiko

from ...core.constants import COPY_BUFSIZE, DEFAULT_HOST_KEY_POLICY
from ...core.exceptions import (
    LocalIOError,
    RemoteIOError,
    RemoteNotFoundError,
    SessionClosedError,
    TransferError,
)
from ...core.interfaces import ErrorReporter, FileTransferClient, LoggingReporter
from ...core.logging import get_logger
from ...core.utils import parse_address, remote_parent
from .connect import open_file_client, open_transport
from .hostkeys import HostKeyPolicy
from .models import Credential, FileInfo

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]
Content = Union[bytes, bytearray, memoryview, str]

# paramiko reports a dead channel or dropped connection outside OSError
_REMOTE_ERRORS = (OSError, EOFError, paramiko.SSHException)


class RemoteFileSession:
    """
    File operations over one SFTP session.

    - Owns the protocol client and the SSH transport; both are released by close()
    - Every operation is a single attempt; failures are raised as RemoteFSError
      subclasses with the original exception chained
    - Operations are serialized with an internal lock, so one session may be
      shared between threads but never runs two requests at once
    - Supports the with statement
    """

    def __init__(
        self,
        client: FileTransferClient,
        transport: Optional[paramiko.SSHClient] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> None:
        """
        Wrap an already connected protocol client.

        Args:
            client: Protocol client
            transport: Connection underneath ``client``, closed after it
            reporter: Receives errors raised while closing
        """
        self._client: Optional[FileTransferClient] = client
        self._transport = transport
        self._reporter = reporter or LoggingReporter()
        self._lock = threading.RLock()

    # --------------------
    # Connection management
    # --------------------
    @classmethod
    def connect(
        cls,
        address: str,
        user: str,
        credential: Credential,
        host_key_policy: HostKeyPolicy = DEFAULT_HOST_KEY_POLICY,
        timeout: Optional[float] = None,
        known_hosts: Optional[str] = None,
        reporter: Optional[ErrorReporter] = None,
    ) -> RemoteFileSession:
        """
        Open the transport, start SFTP on it and return a ready session.

        Args:
            address: ``host`` or ``host:port``
            user: Login name
            credential: Password or key credential, not retained
            host_key_policy: See resolve_host_key_policy
            timeout: Connect timeout in seconds, None waits indefinitely
            known_hosts: Extra known_hosts file
            reporter: Receives errors raised while closing

        Raises:
            ConfigError: If the address or the known_hosts file is unusable
            ConnectError: If the transport or the SFTP subsystem fails
        """
        host, port = parse_address(address)
        transport = open_transport(
            host,
            port,
            user,
            credential,
            host_key_policy=host_key_policy,
            timeout=timeout,
            known_hosts=known_hosts,
        )
        try:
            client = open_file_client(transport)
        except Exception:
            transport.close()
            raise
        return cls(client, transport=transport, reporter=reporter)

    @classmethod
    def connect_with_password(cls, address: str, user: str, password: str, **options) -> RemoteFileSession:
        """Connect using password authentication"""
        return cls.connect(address, user, Credential.from_password(password), **options)

    @classmethod
    def connect_with_private_key(
        cls,
        address: str,
        user: str,
        key_path: str,
        passphrase: Optional[str] = None,
        **options,
    ) -> RemoteFileSession:
        """Connect using a private key file"""
        return cls.connect(address, user, Credential.from_key_file(key_path, passphrase), **options)

    @property
    def closed(self) -> bool:
        return self._client is None and self._transport is None

    def close(self) -> List[Exception]:
        """
        Release the protocol client, then the transport.

        Never raises. Safe to call more than once.

        Returns:
            Errors raised by the underlying releases, empty when clean
        """
        errors: List[Exception] = []
        with self._lock:
            client, self._client = self._client, None
            transport, self._transport = self._transport, None

            for name, resource in (("SFTP client", client), ("SSH transport", transport)):
                if resource is None:
                    continue
                try:
                    resource.close()
                except Exception as e:
                    errors.append(e)
                    self._report_close_error(f"close {name}", e)
        return errors

    def _report_close_error(self, operation: str, error: Exception) -> None:
        try:
            self._reporter.report(operation, error)
        except Exception as report_error:
            logger.warning("Error reporter failed on %s (%s): %s", operation, error, report_error)

    def __enter__(self) -> RemoteFileSession:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @contextmanager
    def _session(self) -> Iterator[FileTransferClient]:
        """Hold the lock and yield the live client"""
        with self._lock:
            if self._client is None:
                raise SessionClosedError("session is closed")
            yield self._client

    # --------------------
    # File content
    # --------------------
    def upload_file(
        self,
        local_path: Union[str, Path],
        remote_path: str,
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Copy a local file to the server, creating remote parents as needed.

        An existing remote file is truncated.

        Args:
            local_path: Source file
            remote_path: Destination path
            progress: Called with (bytes_sent, total_bytes) after each chunk

        Returns:
            Number of bytes copied

        Raises:
            LocalIOError: If the source cannot be opened
            RemoteIOError: If the parent or destination cannot be created
            TransferError: If the copy fails midway
        """
        local_path = Path(local_path)
        with self._session() as client:
            try:
                local_file = open(local_path, "rb")
            except OSError as e:
                raise LocalIOError(f"failed to open local file {local_path}: {e}", str(local_path)) from e

            with local_file:
                total = _local_size(local_file)
                parent = remote_parent(remote_path)
                if parent:
                    try:
                        client.mkdir_all(parent)
                    except _REMOTE_ERRORS as e:
                        raise _remote_error(
                            f"failed to create remote directory {parent}", parent, e
                        ) from e

                try:
                    remote_file = client.create(remote_path)
                except _REMOTE_ERRORS as e:
                    raise _remote_error(
                        f"failed to create remote file {remote_path}", remote_path, e
                    ) from e

                try:
                    with remote_file:
                        copied = _copy_stream(local_file, remote_file, total, progress)
                except _REMOTE_ERRORS as e:
                    raise TransferError(f"failed to upload file {remote_path}: {e}", remote_path) from e

        logger.debug("Uploaded %s -> %s (%d bytes)", local_path, remote_path, copied)
        return copied

    def download_file(
        self,
        remote_path: str,
        local_path: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Copy a remote file to the local disk, creating local parents as needed.

        Returns:
            Number of bytes copied

        Raises:
            RemoteIOError: If the source cannot be opened
            LocalIOError: If the local parent or file cannot be created
            TransferError: If the copy fails midway
        """
        local_path = Path(local_path)
        with self._session() as client:
            try:
                remote_file = client.open_read(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to open remote file {remote_path}", remote_path, e) from e

            with remote_file:
                total = _remote_size(client, remote_path)
                try:
                    local_path.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise LocalIOError(
                        f"failed to create local directory {local_path.parent}: {e}",
                        str(local_path.parent),
                    ) from e

                try:
                    local_file = open(local_path, "wb")
                except OSError as e:
                    raise LocalIOError(
                        f"failed to create local file {local_path}: {e}", str(local_path)
                    ) from e

                try:
                    with local_file:
                        copied = _copy_stream(remote_file, local_file, total, progress)
                except _REMOTE_ERRORS as e:
                    raise TransferError(f"failed to download file {remote_path}: {e}", remote_path) from e

        logger.debug("Downloaded %s -> %s (%d bytes)", remote_path, local_path, copied)
        return copied

    def read_file_content(self, remote_path: str) -> bytes:
        """Read a whole remote file into memory"""
        with self._session() as client:
            try:
                remote_file = client.open_read(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to open file {remote_path}", remote_path, e) from e

            with remote_file:
                try:
                    return remote_file.read()
                except _REMOTE_ERRORS as e:
                    raise _remote_error(f"failed to read file {remote_path}", remote_path, e) from e

    def update_file(self, remote_path: str, content: Content) -> None:
        """Replace the contents of a remote file, creating it if missing"""
        data = _as_bytes(content)
        with self._session() as client:
            try:
                remote_file = client.create(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(
                    f"failed to open file {remote_path} for writing", remote_path, e
                ) from e

            # close() flushes buffered writes, so it belongs in the same guard
            try:
                with remote_file:
                    remote_file.write(data)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to write file {remote_path}", remote_path, e) from e

    def append_to_file(self, remote_path: str, content: Content) -> None:
        """Write at the end of an existing remote file; the file is never created"""
        data = _as_bytes(content)
        with self._session() as client:
            try:
                remote_file = client.open_append(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(
                    f"failed to open file {remote_path} for appending", remote_path, e
                ) from e

            try:
                with remote_file:
                    remote_file.write(data)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to append to file {remote_path}", remote_path, e) from e

    # --------------------
    # Metadata and directories
    # --------------------
    def create_directory(self, remote_path: str) -> None:
        """Create a directory and its parents; no error if it already exists"""
        with self._session() as client:
            try:
                client.mkdir_all(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to create directory {remote_path}", remote_path, e) from e

    def create_file(self, remote_path: str) -> None:
        """Create an empty file, truncating an existing one"""
        with self._session() as client:
            try:
                client.create(remote_path).close()
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to create file {remote_path}", remote_path, e) from e

    def list_directory(self, remote_path: str) -> List[FileInfo]:
        """Immediate children of a directory, sorted by name"""
        with self._session() as client:
            try:
                return client.listdir(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to read directory {remote_path}", remote_path, e) from e

    def get_file_info(self, remote_path: str) -> FileInfo:
        with self._session() as client:
            try:
                return client.stat(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(
                    f"failed to get file info for {remote_path}", remote_path, e
                ) from e

    def file_exists(self, remote_path: str) -> bool:
        """
        Check whether a remote path exists.

        Only a not-found answer means False; any other failure, such as
        permission denied, is raised.
        """
        try:
            self.get_file_info(remote_path)
        except RemoteNotFoundError:
            return False
        return True

    def rename_file(self, old_path: str, new_path: str, overwrite: bool = False) -> None:
        """
        Rename a path.

        Without ``overwrite`` most servers refuse an existing target. With
        it, the posix-rename extension replaces the target atomically.
        """
        with self._session() as client:
            try:
                client.rename(old_path, new_path, overwrite=overwrite)
            except _REMOTE_ERRORS as e:
                raise _remote_error(
                    f"failed to rename {old_path} to {new_path}", old_path, e
                ) from e

    # --------------------
    # Deletion
    # --------------------
    def delete_file(self, remote_path: str) -> None:
        with self._session() as client:
            try:
                client.remove(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to delete file {remote_path}", remote_path, e) from e

    def delete_directory(self, remote_path: str) -> None:
        """Remove an empty directory"""
        with self._session() as client:
            try:
                client.rmdir(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(f"failed to delete directory {remote_path}", remote_path, e) from e

    def delete_directory_recursive(self, remote_path: str) -> None:
        """
        Remove a directory and everything in it.

        Stops at the first failure. Entries removed before the failure stay
        removed; nothing is rolled back.
        """
        with self._session() as client:
            try:
                client.remove_all(remote_path)
            except _REMOTE_ERRORS as e:
                raise _remote_error(
                    f"failed to delete directory {remote_path} recursively", remote_path, e
                ) from e


# ============================================================
# Helpers
# ============================================================

def _remote_error(message: str, path: str, error: Exception) -> RemoteIOError:
    """Wrap a client failure, keeping not-found distinguishable"""
    logger.debug("%s: %r", message, error)
    if isinstance(error, FileNotFoundError):
        return RemoteNotFoundError(f"{message}: {error}", path)
    return RemoteIOError(f"{message}: {error}", path)


def _as_bytes(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


def _local_size(handle: BinaryIO) -> int:
    return os.fstat(handle.fileno()).st_size


def _remote_size(client: FileTransferClient, remote_path: str) -> int:
    """Size for progress reporting only; 0 when unknown"""
    try:
        return client.stat(remote_path).size
    except _REMOTE_ERRORS:
        return 0


def _copy_stream(
    source: BinaryIO,
    target: BinaryIO,
    total: int,
    progress: Optional[ProgressCallback],
) -> int:
    """Copy until EOF in COPY_BUFSIZE chunks"""
    copied = 0
    while True:
        chunk = source.read(COPY_BUFSIZE)
        if not chunk:
            break
        target.write(chunk)
        copied += len(chunk)
        if progress:
            progress(copied, total)
    return copied
