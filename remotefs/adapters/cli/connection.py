"""
Session factory implementation
"""
from pathlib import Path
from typing import Dict, Any, Optional

from ...core.interfaces import ConnectionFactory, ErrorReporter, PromptProvider
from ...domain.files.service import RemoteFileSession
from ..config.loader import ConfigLoader, resolve_connection_config


class RemoteSessionFactory(ConnectionFactory):
    """RemoteFileSession factory driven by CLI options, env and TOML"""
    
    def __init__(
        self,
        prompts: Optional[PromptProvider] = None,
        reporter: Optional[ErrorReporter] = None,
        loader: Optional[ConfigLoader] = None,
    ):
        self.prompts = prompts
        self.reporter = reporter
        self.loader = loader or ConfigLoader()
    
    def create(self, params: Dict[str, Any]) -> RemoteFileSession:
        """
        Create and connect a session.
        
        Args:
            params: CLI overrides plus an optional ``config_path``
        
        Returns:
            Connected RemoteFileSession
        
        Raises:
            ConfigError: If the configuration is incomplete
            ConnectError: If connection fails
        """
        overrides = dict(params)
        config_path = overrides.pop("config_path", None)
        cfg = self.loader.load(
            toml_path=Path(config_path).expanduser() if config_path else None,
            cli_overrides=overrides,
        )
        
        # Ask for a password only when nothing else can authenticate
        if (
            self.prompts is not None
            and not cfg.get("key")
            and cfg.get("password") is None
            and not cfg.get("ssh_config")
            and cfg.get("address")
            and cfg.get("user")
        ):
            cfg["password"] = self.prompts.prompt(
                f"Password for {cfg['user']}@{cfg['address']}", password=True
            )
        
        config = resolve_connection_config(cfg)
        return RemoteFileSession.connect(
            config.address,
            config.user,
            config.credential,
            reporter=self.reporter,
            **config.session_options(),
        )
