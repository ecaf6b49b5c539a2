"""Elysium error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Document / index
- 4xxx: Plugin
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Document / index (3xxx)
    DOCUMENT_NOT_TRACKED = 3001
    DOCUMENT_UNREADABLE = 3002

    # Plugin (4xxx)
    PLUGIN_UNKNOWN = 4001
    PLUGIN_FAILED = 4002


@dataclass(frozen=True, slots=True)
class ElysiumError(Exception):
    """Base error with structured context for logs and CLI output."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ElysiumError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class DocumentError(ElysiumError):
    """Document store errors."""

    @classmethod
    def not_tracked(cls, document_id: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_NOT_TRACKED,
            message=f"Document is not tracked: {document_id}",
            details={"document": document_id},
        )

    @classmethod
    def unreadable(cls, document_id: str, reason: str) -> "DocumentError":
        return cls(
            code=ErrorCode.DOCUMENT_UNREADABLE,
            message=f"Cannot read {document_id}: {reason}",
            details={"document": document_id, "reason": reason},
        )


class PluginError(ElysiumError):
    """Plugin selection and plugin runtime failures."""

    @classmethod
    def unknown(cls, name: str, available: list[str]) -> "PluginError":
        return cls(
            code=ErrorCode.PLUGIN_UNKNOWN,
            message=f"Unknown plugin '{name}' (available: {', '.join(available)})",
            details={"plugin": name, "available": available},
        )

    @classmethod
    def failed(cls, plugin: str, operation: str, reason: str) -> "PluginError":
        return cls(
            code=ErrorCode.PLUGIN_FAILED,
            message=f"Plugin '{plugin}' failed during {operation}: {reason}",
            details={"plugin": plugin, "operation": operation, "reason": reason},
        )

