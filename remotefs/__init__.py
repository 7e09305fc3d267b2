"""
remotefs - file management over SFTP

Thin session layer over paramiko exposing CRUD-style file operations:
- Upload, download, read, overwrite and append remote files
- Create, list, stat, rename and delete files and directories
- Password and private key authentication with pluggable host key trust
- A typer/rich command line front end
"""

__version__ = "0.1.0"

# Export core components
from .core.exceptions import (
    RemoteFSError,
    ConfigError,
    ConnectError,
    ConnectFailure,
    ProtocolInitError,
    SessionClosedError,
    LocalIOError,
    RemoteIOError,
    RemoteNotFoundError,
    TransferError,
)
from .core.interfaces import FileTransferClient, ErrorReporter, LoggingReporter

# Export domain models
from .domain.files import (
    RemoteFileSession,
    FileInfo,
    Credential,
    ParamikoFileClient,
    run_walkthrough,
)

__all__ = [
    # Version
    "__version__",
    # Session
    "RemoteFileSession",
    "ParamikoFileClient",
    "FileTransferClient",
    # Models
    "FileInfo",
    "Credential",
    # Reporting
    "ErrorReporter",
    "LoggingReporter",
    "run_walkthrough",
    # Errors
    "RemoteFSError",
    "ConfigError",
    "ConnectError",
    "ConnectFailure",
    "ProtocolInitError",
    "SessionClosedError",
    "LocalIOError",
    "RemoteIOError",
    "RemoteNotFoundError",
    "TransferError",
]
