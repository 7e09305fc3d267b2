"""
File session data models
"""
import io
import stat
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import paramiko

from ...core.exceptions import ConnectError, ConnectFailure


# Tried in order; paramiko has no generic "load any key" before 3.2
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


@dataclass(frozen=True)
class FileInfo:
    """Read-only snapshot of a remote path's metadata"""
    name: str
    size: int
    mode: int
    mtime: datetime
    is_dir: bool

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.mode)

    @property
    def permissions(self) -> str:
        """ls-style permission string, e.g. ``-rw-r--r--``"""
        return stat.filemode(self.mode)

    @classmethod
    def from_attributes(cls, attrs: paramiko.SFTPAttributes, name: Optional[str] = None) -> "FileInfo":
        """
        Build from paramiko attributes.
        
        ``SFTPClient.stat`` leaves ``filename`` unset, so callers pass the
        name explicitly in that case.
        """
        mode = attrs.st_mode or 0
        return cls(
            name=name if name is not None else (getattr(attrs, "filename", None) or ""),
            size=attrs.st_size or 0,
            mode=mode,
            mtime=datetime.fromtimestamp(attrs.st_mtime or 0, tz=timezone.utc),
            is_dir=stat.S_ISDIR(mode),
        )


@dataclass(frozen=True)
class Credential:
    """
    Authentication material used once at connect time.
    
    Exactly one of ``password`` or ``key_path`` is set. Secrets are kept
    out of ``repr``.
    """
    password: Optional[str] = field(default=None, repr=False)
    key_path: Optional[str] = None
    passphrase: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if (self.password is None) == (self.key_path is None):
            raise ValueError("Credential needs exactly one of password or key_path")

    @classmethod
    def from_password(cls, password: str) -> "Credential":
        return cls(password=password)

    @classmethod
    def from_key_file(cls, key_path: str, passphrase: Optional[str] = None) -> "Credential":
        return cls(key_path=key_path, passphrase=passphrase)

    @property
    def method(self) -> str:
        return "password" if self.password is not None else "key"

    def connect_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for ``paramiko.SSHClient.connect``.
        
        Raises:
            ConnectError: KEY_UNREADABLE or KEY_UNPARSABLE for key credentials
        """
        if self.password is not None:
            return {"password": self.password}
        return {"pkey": self._load_private_key()}

    def _load_private_key(self) -> paramiko.PKey:
        """Read the key file once, then try each supported key type"""
        p = Path(self.key_path).expanduser()

        try:
            text = p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConnectError(
                f"failed to read private key {p}: {e}", ConnectFailure.KEY_UNREADABLE
            ) from e

        last_error: Optional[Exception] = None
        for key_cls in _KEY_CLASSES:
            try:
                return key_cls.from_private_key(io.StringIO(text), password=self.passphrase)
            except paramiko.PasswordRequiredException as e:
                raise ConnectError(
                    f"private key {p} is encrypted and no passphrase was given",
                    ConnectFailure.KEY_UNPARSABLE,
                ) from e
            except (paramiko.SSHException, ValueError) as e:
                last_error = e

        raise ConnectError(
            f"failed to parse private key {p}: {last_error}", ConnectFailure.KEY_UNPARSABLE
        ) from last_error
