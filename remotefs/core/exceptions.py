"""
Unified exception definitions
"""
from enum import Enum
from typing import Optional


class RemoteFSError(Exception):
    """Base exception class"""
    pass


class ConfigError(RemoteFSError):
    """Configuration error"""
    pass


class ConnectFailure(str, Enum):
    """Reason a session could not be established"""
    UNREACHABLE = "unreachable"
    AUTH_REJECTED = "auth_rejected"
    KEY_UNREADABLE = "key_unreadable"
    KEY_UNPARSABLE = "key_unparsable"
    HOST_KEY_REJECTED = "host_key_rejected"
    PROTOCOL = "protocol"


class ConnectError(RemoteFSError):
    """Connection error"""

    def __init__(self, message: str, reason: ConnectFailure):
        super().__init__(message)
        self.reason = reason


class ProtocolInitError(ConnectError):
    """SFTP subsystem could not be started on an open transport"""

    def __init__(self, message: str):
        super().__init__(message, ConnectFailure.PROTOCOL)


class SessionClosedError(RemoteFSError):
    """Operation attempted on a closed session"""
    pass


class LocalIOError(RemoteFSError):
    """Local filesystem error"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RemoteIOError(RemoteFSError):
    """Remote filesystem error"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RemoteNotFoundError(RemoteIOError):
    """Remote path does not exist"""
    pass


class TransferError(RemoteIOError):
    """Byte stream broke during upload or download"""
    pass
