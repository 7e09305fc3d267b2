"""
Core utility functions
"""
import posixpath
import paramiko
from pathlib import Path
from typing import Dict, Any, Tuple

from .constants import DEFAULT_SSH_PORT, SSH_CONFIG_PATH
from .exceptions import ConfigError


# ============================================================
# Address Parsing
# ============================================================

def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` address.
    
    The port defaults to 22 when omitted. IPv6 hosts must be bracketed
    when a port is given (``[::1]:2222``).
    
    Args:
        address: Address string
    
    Returns:
        (host, port)
    
    Raises:
        ConfigError: If the address is empty or the port is invalid
    """
    address = address.strip()
    if not address:
        raise ConfigError("address is empty")
    
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep or not host:
            raise ConfigError(f"invalid address: {address}")
        if not rest:
            return host, DEFAULT_SSH_PORT
        if not rest.startswith(":"):
            raise ConfigError(f"invalid address: {address}")
        port_str = rest[1:]
    elif address.count(":") == 1:
        host, port_str = address.split(":")
        if not host:
            raise ConfigError(f"invalid address: {address}")
    else:
        # Bare hostname or unbracketed IPv6 literal
        return address, DEFAULT_SSH_PORT
    
    try:
        port = int(port_str)
    except ValueError:
        raise ConfigError(f"invalid port in address: {address}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"port out of range in address: {address}")
    return host, port


def format_address(host: str, port: int) -> str:
    """Inverse of parse_address"""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


# ============================================================
# Remote Paths
# ============================================================

def remote_parent(path: str) -> str:
    """Parent of a remote path; remote paths are always POSIX"""
    return posixpath.dirname(path.rstrip("/")) if path not in ("", "/") else path


# ============================================================
# SSH Config Management
# ============================================================

def load_ssh_config(hostname: str) -> Dict[str, Any]:
    """
    Load configuration for specified Host from ~/.ssh/config.
    
    Args:
        hostname: Host name in SSH configuration
    
    Returns:
        Dictionary containing host, user, port, key_file
    
    Raises:
        ConfigError: If ~/.ssh/config doesn't exist
    """
    config_path = Path(SSH_CONFIG_PATH).expanduser()
    if not config_path.exists():
        raise ConfigError(f"{SSH_CONFIG_PATH} does not exist")

    ssh_config = paramiko.SSHConfig.from_path(str(config_path))
    entry = ssh_config.lookup(hostname)

    return {
        "host": entry.get("hostname", hostname),
        "user": entry.get("user", None),
        "port": int(entry.get("port", DEFAULT_SSH_PORT)),
        "key_file": entry.get("identityfile", [None])[0],
    }
