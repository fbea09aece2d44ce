"""Unit tests for the quote command."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

from click.testing import CliRunner

from autonix_cli.main import cli


class TestQuoteCommand:
    def test_default_server(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml({"kind": "server"})

        result = isolated_runner.invoke(cli, ["quote", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["kind"] == "server"
        assert data["total"] == "12.00"
        assert data["hourly"] == "0.0164"
        assert [item["label"] for item in data["items"]] == [
            "Plan (voc-c-1c-2gb-50s)",
            "Automatic backups",
        ]

    def test_load_balancer(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml(
            {"kind": "load_balancer", "name": "edge", "location_ids": ["us-e", "de"], "node_count": 2},
            filename="lb.yaml",
        )

        result = isolated_runner.invoke(cli, ["quote", "-f", "lb.yaml", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["total"] == "40.00"

    def test_resize_file_system(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml(
            {
                "kind": "resize",
                "target_name": "shared",
                "resource_kind": "file_system",
                "current_size": 100,
                "new_size": 250,
                "unit_rate": 0.10,
            }
        )

        result = isolated_runner.invoke(cli, ["quote", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["total"] == "25.00"

    def test_table_output(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml({"kind": "server", "quantity": 2})

        result = isolated_runner.invoke(cli, ["quote"])

        assert result.exit_code == 0
        assert "Total" in result.output
        assert "$24.00" in result.output
        assert "Hourly: $0.0329/hr" in result.output

    def test_missing_file(self, isolated_runner: CliRunner) -> None:
        result = isolated_runner.invoke(cli, ["quote", "-f", "nope.yaml"])

        assert result.exit_code == 2
        assert "File not found" in result.output

    def test_invalid_yaml(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml("kind: [server")

        result = isolated_runner.invoke(cli, ["quote"])

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output

    def test_missing_kind(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml({"label": "data"})

        result = isolated_runner.invoke(cli, ["quote"])

        assert result.exit_code == 1
        assert "'kind'" in result.output

    def test_invalid_field(
        self, isolated_runner: CliRunner, create_selection_yaml: Callable[..., Path]
    ) -> None:
        create_selection_yaml({"kind": "server", "quantity": 0})

        result = isolated_runner.invoke(cli, ["quote"])

        assert result.exit_code == 1
        assert "quantity" in result.output
