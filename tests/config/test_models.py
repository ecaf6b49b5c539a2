"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from elysium.config.models import (
    ElysiumConfig,
    IndexConfig,
    LogOutputConfig,
    PluginsConfig,
    ServerConfig,
)


class TestLogOutputConfig:
    """Log destination validation."""

    @pytest.mark.parametrize("destination", ["stderr", "stdout"])
    def test_streams_accepted(self, destination: str) -> None:
        assert LogOutputConfig(destination=destination).destination == destination

    def test_absolute_path_accepted(self, tmp_path: Path) -> None:
        path = tmp_path / "x.log"
        assert LogOutputConfig(destination=str(path)).destination == str(path)

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/x.log")


class TestServerConfig:
    def test_defaults(self) -> None:
        config = ServerConfig()
        assert (config.transport, config.host, config.port) == ("stdio", "127.0.0.1", 2087)

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=port)

    def test_transport_literal(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(transport="pipe")  # type: ignore[arg-type]


class TestIndexConfig:
    def test_extensions_get_leading_dot(self) -> None:
        assert IndexConfig(extensions=["c", ".h"]).extensions == [".c", ".h"]


class TestPluginsConfig:
    """Plugin selection validation."""

    def test_all_enabled_by_default(self) -> None:
        assert PluginsConfig().enabled == ["init-deps", "hooks"]

    def test_duplicates_collapse_in_order(self) -> None:
        assert PluginsConfig(enabled=["hooks", "init-deps", "hooks"]).enabled == [
            "hooks",
            "init-deps",
        ]

    def test_unknown_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown plugin"):
            PluginsConfig(enabled=["hooks", "bogus"])

    def test_empty_allowed(self) -> None:
        assert ElysiumConfig(plugins=PluginsConfig(enabled=[])).plugins.enabled == []
