"""Shared test fixtures for autonix-cli tests.

Provides CliRunner fixtures and helpers for writing selection files.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner

SELECTION_YAML_FILENAME = "selection.yaml"


@pytest.fixture(autouse=True)
def logging_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Record configure_logging calls instead of reconfiguring structlog globally."""
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(
        "autonix_core.observability.configure_logging",
        lambda **kwargs: calls.append(kwargs),
    )
    return calls


@pytest.fixture(autouse=True)
def clear_catalog_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    from autonix_core.config import CATALOG_ENV_VAR, CatalogResolver

    monkeypatch.delenv(CATALOG_ENV_VAR, raising=False)
    CatalogResolver.clear_cache()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    This fixture creates a temporary directory and changes to it
    for the duration of the test.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def create_selection_yaml(isolated_runner: CliRunner) -> Callable[..., Path]:
    """Factory fixture to create selection files in the isolated filesystem.

    Accepts either a mapping (dumped as YAML) or raw text.
    """

    def _create(content: dict[str, Any] | str, filename: str = SELECTION_YAML_FILENAME) -> Path:
        path = Path(filename)
        text = content if isinstance(content, str) else yaml.safe_dump(content)
        path.write_text(text)
        return path

    return _create
