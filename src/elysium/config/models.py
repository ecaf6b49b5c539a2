"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags)
2. Environment variables (ELYSIUM__SECTION__KEY)
3. Repo YAML (<project>/.elysium/config.yaml)
4. Global YAML (~/.config/elysium/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    ELYSIUM__<SECTION>__<KEY>=<VALUE>

Examples:
    ELYSIUM__LOGGING__LEVEL=DEBUG
    ELYSIUM__SERVER__TRANSPORT=tcp
    ELYSIUM__PLUGINS__ENABLED='["hooks"]'
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from elysium.config.constants import PLUGIN_NAMES

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        ELYSIUM__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every index update.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(BaseModel):
    """Language-server transport configuration.

    Env vars:
        ELYSIUM__SERVER__TRANSPORT: stdio or tcp
        ELYSIUM__SERVER__HOST: Bind address for tcp
        ELYSIUM__SERVER__PORT: Port for tcp
    """

    transport: Literal["stdio", "tcp"] = Field(
        default="stdio",
        description="How the editor talks to the server. stdio is what editors spawn.",
    )
    host: str = Field(default="127.0.0.1", description="Bind address for tcp transport.")
    port: int = Field(default=2087, description="Port for tcp transport.")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not (0 <= v <= 65535):
            raise ValueError(f"Port must be 0-65535, got {v}")
        return v


class IndexConfig(BaseModel):
    """Project scan configuration.

    Env vars:
        ELYSIUM__INDEX__EXTENSIONS: Source suffixes handed to plugins
        ELYSIUM__INDEX__MAX_FILE_SIZE_MB: Skip larger files during the startup scan
    """

    extensions: list[str] = Field(
        default_factory=lambda: [".c"],
        description="File suffixes that carry macro invocations.",
    )
    max_file_size_mb: int = Field(
        default=4,
        description="Skip files larger than this (MB) during the startup scan.",
    )
    exclude_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directory names to skip. Prefix with ! to re-enable a default.",
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in v]


class PluginsConfig(BaseModel):
    """Macro family selection.

    Env vars:
        ELYSIUM__PLUGINS__ENABLED: JSON list of plugin names
    """

    enabled: list[str] = Field(
        default_factory=lambda: list(PLUGIN_NAMES),
        description="Enabled macro families, in dispatch order.",
    )

    @field_validator("enabled")
    @classmethod
    def validate_enabled(cls, v: list[str]) -> list[str]:
        unknown = [name for name in v if name not in PLUGIN_NAMES]
        if unknown:
            raise ValueError(f"Unknown plugin(s): {', '.join(unknown)}")
        # Keep first occurrence order
        return list(dict.fromkeys(v))


class ElysiumConfig(BaseModel):
    """Root configuration for Elysium."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
