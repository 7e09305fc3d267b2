"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.constants import DEFAULT_HOST_KEY_POLICY
from ...core.logging import setup_logging, get_logger
from .connection import RemoteSessionFactory
from .files import register_file_commands
from .prompts import ConsoleReporter, RichPromptProvider

logger = get_logger(__name__)

# Create main app
app = typer.Typer(
    name="remotefs",
    add_completion=False,
    help="File management over SFTP",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_file_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file",
    ),
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help="Server address (host or host:port)"
    ),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="Login name"),
    password: Optional[str] = typer.Option(
        None, "--password", help="Password (prompted when neither password nor key is given)"
    ),
    key: Optional[str] = typer.Option(None, "--key", "-i", help="Private key file"),
    passphrase: Optional[str] = typer.Option(None, "--passphrase", help="Private key passphrase"),
    ssh_config: Optional[str] = typer.Option(
        None, "--ssh-config", help="Host alias from ~/.ssh/config"
    ),
    host_key_policy: Optional[str] = typer.Option(
        None,
        "--host-key-policy",
        help=f"Unknown host keys: reject, warn or accept (default: {DEFAULT_HOST_KEY_POLICY})",
    ),
    known_hosts: Optional[str] = typer.Option(
        None, "--known-hosts", help="Extra known_hosts file"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Connect timeout in seconds (default: none)"
    ),
):
    """
    remotefs - file management over SFTP
    
    Connection settings come from options, REMOTEFS_* environment
    variables or a TOML file, in that order of priority.
    """
    # Setup logging
    setup_logging(level=log_level, log_file=log_file)
    
    obj = ctx.ensure_object(dict)
    prompts = obj.setdefault("prompts", RichPromptProvider())
    obj.setdefault("factory", RemoteSessionFactory(prompts=prompts, reporter=ConsoleReporter()))
    obj["params"] = {
        "config_path": str(config) if config else None,
        "address": address,
        "user": user,
        "password": password,
        "key": key,
        "passphrase": passphrase,
        "ssh_config": ssh_config,
        "host_key_policy": host_key_policy,
        "known_hosts": known_hosts,
        "timeout": timeout,
    }


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
