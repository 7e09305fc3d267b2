"""
Remote file session domain
"""
from .models import FileInfo, Credential
from .hostkeys import (
    AcceptAnyPolicy,
    CallbackPolicy,
    HostKeyRejected,
    RejectUnknownPolicy,
    resolve_host_key_policy,
)
from .client import ParamikoFileClient
from .connect import open_transport, open_file_client
from .service import RemoteFileSession
from .walkthrough import WalkthroughResult, run_walkthrough

__all__ = [
    "FileInfo",
    "Credential",
    "AcceptAnyPolicy",
    "CallbackPolicy",
    "HostKeyRejected",
    "RejectUnknownPolicy",
    "resolve_host_key_policy",
    "ParamikoFileClient",
    "open_transport",
    "open_file_client",
    "RemoteFileSession",
    "WalkthroughResult",
    "run_walkthrough",
]
