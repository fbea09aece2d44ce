"""Unit tests for autonix_cli.main module."""

from __future__ import annotations

from typing import Any

import click
import pytest
from click.testing import CliRunner

from autonix_cli import __version__
from autonix_cli.main import LAZY_COMMANDS, LazyGroup, cli


class TestCLIHelp:
    """Tests for CLI help output."""

    def test_help_shows_global_options(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "--version" in result.output
        assert "--no-color" in result.output
        assert "--catalog" in result.output

    def test_help_shows_all_commands(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in LAZY_COMMANDS:
            assert command in result.output

    def test_unknown_command(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["deploy"])
        assert result.exit_code != 0


class TestCLIVersion:
    def test_version_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
        assert "autonix" in result.output


class TestGlobalOptions:
    def test_logging_quiet_by_default(
        self, cli_runner: CliRunner, logging_calls: list[dict[str, Any]]
    ) -> None:
        result = cli_runner.invoke(cli, ["plans", "--json"])

        assert result.exit_code == 0
        assert logging_calls == [{"log_level": "WARNING", "json_format": False}]

    def test_verbose_enables_debug(
        self, cli_runner: CliRunner, logging_calls: list[dict[str, Any]]
    ) -> None:
        result = cli_runner.invoke(cli, ["--verbose", "plans", "--json"])

        assert result.exit_code == 0
        assert logging_calls[0]["log_level"] == "DEBUG"

    def test_no_color_accepted(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--no-color", "plans", "--category", "high_performance"])

        assert result.exit_code == 0
        assert "\x1b[" not in result.output


class TestLazyGroup:
    def _group(self, **lazy: str) -> LazyGroup:
        return LazyGroup(name="root", lazy_subcommands=lazy)

    def test_unknown_command(self) -> None:
        group = self._group()
        with click.Context(group) as ctx:
            assert group.get_command(ctx, "nope") is None

    def test_command_imported_once(self) -> None:
        group = self._group(plans="autonix_cli.commands.plans.plans")
        with click.Context(group) as ctx:
            first = group.get_command(ctx, "plans")
            assert first is not None
            assert group.get_command(ctx, "plans") is first
            assert group.commands["plans"] is first

    def test_target_must_be_a_command(self) -> None:
        group = self._group(version="autonix_cli.__version__")
        with click.Context(group) as ctx, pytest.raises(TypeError, match="not a click command"):
            group.get_command(ctx, "version")
