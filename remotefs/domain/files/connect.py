"""
Transport and protocol client establishment
"""
import os
import socket
from typing import Optional

import paramiko
from paramiko.ssh_exception import NoValidConnectionsError

from ...core.exceptions import ConfigError, ConnectError, ConnectFailure, ProtocolInitError
from ...core.logging import get_logger
from .client import ParamikoFileClient
from .hostkeys import HostKeyPolicy, HostKeyRejected, resolve_host_key_policy
from .models import Credential

logger = get_logger(__name__)


def open_transport(
    host: str,
    port: int,
    user: str,
    credential: Credential,
    host_key_policy: HostKeyPolicy = "reject",
    timeout: Optional[float] = None,
    known_hosts: Optional[str] = None,
) -> paramiko.SSHClient:
    """
    Open an authenticated SSH connection.
    
    Only the given credential is offered; agent and default keys are
    disabled. The client is closed before any error is raised.
    
    Args:
        host: Remote host
        port: Remote port
        user: Login name
        credential: Password or private key
        host_key_policy: Trust policy for hosts missing from known_hosts
        timeout: TCP/banner/auth timeout in seconds, None for none
        known_hosts: Extra known_hosts file loaded after the system one, ``~`` expanded
    
    Returns:
        Connected paramiko SSHClient
    
    Raises:
        ConfigError: If the known_hosts file cannot be loaded
        ConnectError: With a reason matching the failure
    """
    policy = resolve_host_key_policy(host_key_policy)
    auth_kwargs = credential.connect_kwargs()
    
    client = paramiko.SSHClient()
    client.load_system_host_keys()
    if known_hosts:
        known_hosts = os.path.expanduser(known_hosts)
        try:
            client.load_host_keys(known_hosts)
        except (OSError, paramiko.SSHException) as e:
            client.close()
            raise ConfigError(f"failed to load known_hosts file {known_hosts}: {e}") from e
    client.set_missing_host_key_policy(policy)
    
    try:
        logger.info("Connecting to %s@%s:%s (%s auth)", user, host, port, credential.method)
        client.connect(
            hostname=host,
            port=port,
            username=user,
            timeout=timeout,
            banner_timeout=timeout,
            auth_timeout=timeout,
            look_for_keys=False,
            allow_agent=False,
            **auth_kwargs,
        )
    except Exception as e:
        client.close()
        raise _translate_connect_error(e, host, port) from e
    
    logger.info("Connected to %s:%s", host, port)
    return client


def open_file_client(ssh_client: paramiko.SSHClient) -> ParamikoFileClient:
    """
    Start the SFTP subsystem on an open connection.
    
    The caller keeps ownership of ``ssh_client`` and must close it on error.
    
    Raises:
        ProtocolInitError: If the subsystem cannot be started
    """
    try:
        sftp = ssh_client.open_sftp()
    except Exception as e:
        raise ProtocolInitError(f"failed to create SFTP client: {e}") from e
    return ParamikoFileClient(sftp)


def _translate_connect_error(error: Exception, host: str, port: int) -> ConnectError:
    """Classify a failure raised by SSHClient.connect"""
    target = f"{host}:{port}"
    
    if isinstance(error, ConnectError):
        return error
    # Subclass of SSHException, so checked before it
    if isinstance(error, paramiko.AuthenticationException):
        return ConnectError(
            f"authentication rejected by {target}: {error}", ConnectFailure.AUTH_REJECTED
        )
    if isinstance(error, (paramiko.BadHostKeyException, HostKeyRejected)):
        return ConnectError(
            f"host key verification failed for {target}: {error}",
            ConnectFailure.HOST_KEY_REJECTED,
        )
    if isinstance(error, (NoValidConnectionsError, socket.timeout, socket.gaierror, OSError)):
        return ConnectError(
            f"failed to connect to server {target}: {error}", ConnectFailure.UNREACHABLE
        )
    if isinstance(error, paramiko.SSHException):
        return ConnectError(
            f"SSH negotiation with {target} failed: {error}", ConnectFailure.PROTOCOL
        )
    return ConnectError(f"failed to connect to server {target}: {error}", ConnectFailure.UNREACHABLE)
