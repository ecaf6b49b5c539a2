"""Tests for elysium serve command."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from elysium.cli.main import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def captured_serve() -> Generator[list[tuple[Any, Path]], None, None]:
    calls: list[tuple[Any, Path]] = []
    with patch("elysium.cli.serve.serve", lambda config, root: calls.append((config, root))):
        yield calls


class TestServeCommand:
    """Flag to config mapping."""

    def test_defaults_to_stdio_with_all_plugins(
        self, tmp_path: Path, captured_serve: list[tuple[Any, Path]]
    ) -> None:
        result = runner.invoke(cli, ["serve", "--project-root", str(tmp_path)])

        assert result.exit_code == 0, result.output
        ((config, root),) = captured_serve
        assert root == tmp_path.resolve()
        assert config.server.transport == "stdio"
        assert config.plugins.enabled == ["init-deps", "hooks"]

    def test_flags_override_config(
        self, tmp_path: Path, captured_serve: list[tuple[Any, Path]]
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "serve",
                "--project-root",
                str(tmp_path),
                "--tcp",
                "--port",
                "9999",
                "--plugin",
                "hooks",
                "--log-level",
                "warning",
            ],
        )

        assert result.exit_code == 0, result.output
        ((config, _),) = captured_serve
        assert config.server.transport == "tcp"
        assert config.server.port == 9999
        assert config.plugins.enabled == ["hooks"]
        assert config.logging.level == "WARNING"

    def test_verbose_forces_debug(
        self, tmp_path: Path, captured_serve: list[tuple[Any, Path]]
    ) -> None:
        runner.invoke(cli, ["-v", "serve", "--project-root", str(tmp_path), "--log-level", "ERROR"])

        ((config, _),) = captured_serve
        assert config.logging.level == "DEBUG"

    def test_project_root_required(self) -> None:
        result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 2

    def test_unknown_plugin_rejected(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["serve", "--project-root", str(tmp_path), "--plugin", "x"])
        assert result.exit_code == 2

    @pytest.mark.parametrize(("flags", "reserved"), [([], True), (["--tcp"], False)])
    def test_stdout_reserved_only_for_stdio(
        self,
        tmp_path: Path,
        captured_serve: list[tuple[Any, Path]],
        flags: list[str],
        reserved: bool,
    ) -> None:
        """Logging is told stdout is off limits when the protocol runs over it."""
        seen: list[dict[str, Any]] = []
        with patch("elysium.cli.serve.configure_logging", lambda **kw: seen.append(kw)):
            result = runner.invoke(cli, ["serve", "--project-root", str(tmp_path), *flags])

        assert result.exit_code == 0, result.output
        assert seen[-1]["protocol_on_stdout"] is reserved
