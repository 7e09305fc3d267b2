"""
Configuration adapters
"""
from .loader import ConfigLoader, ConnectionConfig, resolve_connection_config

__all__ = ["ConfigLoader", "ConnectionConfig", "resolve_connection_config"]
