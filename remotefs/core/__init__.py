"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import (
    FileTransferClient,
    ConnectionFactory,
    ErrorReporter,
    LoggingReporter,
    PromptProvider,
)
from .utils import (
    parse_address,
    format_address,
    remote_parent,
    load_ssh_config,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "FileTransferClient",
    "ConnectionFactory",
    "ErrorReporter",
    "LoggingReporter",
    "PromptProvider",
    "parse_address",
    "format_address",
    "remote_parent",
    "load_ssh_config",
]
