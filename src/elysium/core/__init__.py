"""Core module exports."""

from elysium.core.errors import (
    ConfigError,
    DocumentError,
    ElysiumError,
    ErrorCode,
    PluginError,
)
from elysium.core.logging import configure_logging, current_request_id, request_context
from elysium.core.progress import progress, status

__all__ = [
    # Errors
    "ConfigError",
    "DocumentError",
    "ElysiumError",
    "ErrorCode",
    "PluginError",
    # Logging
    "configure_logging",
    "current_request_id",
    "request_context",
    # Progress
    "progress",
    "status",
]
