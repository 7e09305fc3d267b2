"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.constants import DEFAULT_HOST_KEY_POLICY, ENV_PREFIX
from ...core.exceptions import ConfigError
from ...core.utils import format_address, load_ssh_config, parse_address
from ...domain.files.models import Credential


@dataclass
class ConnectionConfig:
    """Everything needed to open a session"""
    address: str
    user: str
    credential: Credential
    host_key_policy: str = DEFAULT_HOST_KEY_POLICY
    known_hosts: Optional[str] = None
    timeout: Optional[float] = None

    def session_options(self) -> Dict[str, Any]:
        """Keyword arguments for RemoteFileSession.connect"""
        return {
            "host_key_policy": self.host_key_policy,
            "known_hosts": self.known_hosts,
            "timeout": self.timeout,
        }


class ConfigLoader:
    """Configuration loader with priority support"""

    # Keys read as plain strings even when they look like numbers or booleans
    _STRING_KEYS = {"password", "passphrase", "user", "address", "key"}

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self._env_prefix = env_prefix

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load TOML configuration file, flattening a [connection] table"""
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to parse TOML configuration: {e}") from e

        connection = data.pop("connection", None)
        if isinstance(connection, dict):
            data.update(connection)
        return data

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config = {}

        # Map environment variables to config keys
        env_mappings = {
            f"{self._env_prefix}ADDRESS": "address",
            f"{self._env_prefix}USER": "user",
            f"{self._env_prefix}PASSWORD": "password",
            f"{self._env_prefix}KEY": "key",
            f"{self._env_prefix}PASSPHRASE": "passphrase",
            f"{self._env_prefix}HOST_KEY_POLICY": "host_key_policy",
            f"{self._env_prefix}KNOWN_HOSTS": "known_hosts",
            f"{self._env_prefix}TIMEOUT": "timeout",
        }

        for env_key, config_key in env_mappings.items():
            value = os.getenv(env_key)
            if value:
                if config_key in self._STRING_KEYS:
                    config[config_key] = value
                else:
                    config[config_key] = self._convert_value(value)

        return config

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type"""
        # Try integer
        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # Return as string
        return value

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}

        for config in configs:
            for key, value in config.items():
                if value is not None:
                    result[key] = value

        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> Dict[str, Any]:
        """
        Load configuration with priority: CLI > env > TOML

        Args:
            toml_path: Path to TOML configuration file
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables

        Returns:
            Merged configuration dictionary
        """
        configs = []

        # 1. Load TOML if provided
        if toml_path:
            configs.append(self.load_toml(toml_path))

        # 2. Load environment variables
        if use_env:
            env_config = self.load_env()
            if env_config:
                configs.append(env_config)

        # 3. Apply CLI overrides (highest priority)
        if cli_overrides:
            configs.append(cli_overrides)

        # Merge all configs
        return self.merge_configs(*configs)


def resolve_connection_config(cfg: Dict[str, Any]) -> ConnectionConfig:
    """
    Build a ConnectionConfig from a merged configuration dictionary.

    Supports:
    - ssh_config: Fill host/port/user/key from ~/.ssh/config
    - address/user/password/key: Direct configuration
    - A key wins over a password when both are present

    Args:
        cfg: Merged configuration dictionary

    Returns:
        ConnectionConfig

    Raises:
        ConfigError: If address, user or a credential is missing
    """
    params = dict(cfg)

    if params.get("ssh_config"):
        entry = load_ssh_config(params["ssh_config"])
        params.setdefault("address", format_address(entry["host"], entry["port"]))
        if entry.get("user"):
            params.setdefault("user", entry["user"])
        if entry.get("key_file") and not params.get("password"):
            params.setdefault("key", entry["key_file"])

    address = params.get("address")
    if not address:
        raise ConfigError("No address configured (use --address or REMOTEFS_ADDRESS)")
    # Validate early so CLI errors point at the configuration
    parse_address(str(address))

    user = params.get("user")
    if not user:
        raise ConfigError("No user configured (use --user or REMOTEFS_USER)")

    if params.get("key"):
        credential = Credential.from_key_file(str(params["key"]), params.get("passphrase"))
    elif params.get("password") is not None:
        credential = Credential.from_password(str(params["password"]))
    else:
        raise ConfigError("No credential configured (password or key required)")

    timeout = params.get("timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid timeout: {timeout!r}") from None

    return ConnectionConfig(
        address=str(address),
        user=str(user),
        credential=credential,
        host_key_policy=str(params.get("host_key_policy", DEFAULT_HOST_KEY_POLICY)),
        known_hosts=params.get("known_hosts"),
        timeout=timeout,
    )
