"""Config module exports."""

from elysium.config.loader import ElysiumSettings, load_config
from elysium.config.models import (
    ElysiumConfig,
    IndexConfig,
    LoggingConfig,
    PluginsConfig,
    ServerConfig,
)

__all__ = [
    "load_config",
    "ElysiumConfig",
    "ElysiumSettings",
    "IndexConfig",
    "LoggingConfig",
    "PluginsConfig",
    "ServerConfig",
]
