"""
Host key trust policies
"""
from typing import Callable, Union

import paramiko

from ...core.exceptions import ConfigError
from ...core.logging import get_logger

logger = get_logger(__name__)

HostKeyCallback = Callable[[str, paramiko.PKey], bool]
HostKeyPolicy = Union[str, paramiko.MissingHostKeyPolicy, HostKeyCallback]


class HostKeyRejected(paramiko.SSHException):
    """Raised by policies that refuse an unknown host key"""
    pass


class CallbackPolicy(paramiko.MissingHostKeyPolicy):
    """Delegates the trust decision for unknown hosts to a callable"""
    
    def __init__(self, callback: HostKeyCallback):
        self.callback = callback
    
    def missing_host_key(self, client, hostname, key):
        if not self.callback(hostname, key):
            raise HostKeyRejected(
                f"host key for {hostname} ({key.get_name()}) rejected by callback"
            )


class RejectUnknownPolicy(paramiko.MissingHostKeyPolicy):
    """Refuses any host not already present in known_hosts"""
    
    def missing_host_key(self, client, hostname, key):
        raise HostKeyRejected(
            f"server {hostname} not found in known_hosts ({key.get_name()} "
            f"{key.get_fingerprint().hex()})"
        )


class AcceptAnyPolicy(paramiko.MissingHostKeyPolicy):
    """Trusts every host key without recording it"""
    
    def missing_host_key(self, client, hostname, key):
        logger.warning(
            "Accepting unverified %s host key for %s", key.get_name(), hostname
        )


_NAMED_POLICIES = {
    "reject": RejectUnknownPolicy,
    "warn": paramiko.WarningPolicy,
    "accept": AcceptAnyPolicy,
}


def resolve_host_key_policy(policy: HostKeyPolicy) -> paramiko.MissingHostKeyPolicy:
    """
    Turn a policy name, paramiko policy or callback into a paramiko policy.
    
    Args:
        policy: "reject", "warn", "accept", a MissingHostKeyPolicy instance,
            or a callable ``(hostname, key) -> bool``
    
    Returns:
        paramiko policy instance
    
    Raises:
        ConfigError: If the name is unknown or the type unsupported
    """
    if isinstance(policy, paramiko.MissingHostKeyPolicy):
        return policy
    
    if isinstance(policy, str):
        try:
            return _NAMED_POLICIES[policy.lower()]()
        except KeyError:
            raise ConfigError(
                f"unknown host key policy '{policy}' (expected one of: "
                f"{', '.join(_NAMED_POLICIES)})"
            ) from None
    
    if callable(policy):
        return CallbackPolicy(policy)
    
    raise ConfigError(f"unsupported host key policy: {policy!r}")
