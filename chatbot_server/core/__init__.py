"""
Core configuration and settings module.

This module contains application-wide configuration including:
- Environment file loading for the MongoDB connection settings
- Optional settings for the model services and the HTTP listener
- The error taxonomy shared by every component
"""

from .config import ConnectionConfig, load_env_vars, get_port
from .errors import (
    ChatbotServerError,
    ConfigError,
    AdapterError,
    StoreConnectionError,
    ServerError,
)

__all__ = [
    "ConnectionConfig",
    "load_env_vars",
    "get_port",
    "ChatbotServerError",
    "ConfigError",
    "AdapterError",
    "StoreConnectionError",
    "ServerError",
]
