"""Shared pytest fixtures for autonix-core tests.

This module provides the reference catalog and freshly seeded selections
used across the unit tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog

from autonix_core.catalog import Catalog
from autonix_core.config import DEFAULT_CATALOG_PATH, CatalogResolver, EngineSettings
from autonix_core.ids import IdFactory
from autonix_core.selection import (
    ServerSelection,
    new_cluster_selection,
    new_server_selection,
)


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture(autouse=True)
def clear_catalog_cache() -> None:
    """Start every test with an empty catalog cache."""
    CatalogResolver.clear_cache()


@pytest.fixture(scope="session")
def catalog() -> Catalog:
    """The packaged reference catalog."""
    return Catalog.from_yaml(DEFAULT_CATALOG_PATH)


@pytest.fixture
def ids() -> IdFactory:
    """Id factory on a frozen clock, so ids are predictable."""
    return IdFactory(clock=lambda: 1_700_000_000.0)


@pytest.fixture
def instant_settings() -> EngineSettings:
    return EngineSettings.instant()


@pytest.fixture
def server_selection(catalog: Catalog) -> ServerSelection:
    """Default deploy-server selection ($10 plan, backups on)."""
    return new_server_selection(catalog)


@pytest.fixture
def named_cluster(catalog: Catalog) -> Any:
    selection = new_cluster_selection(catalog)
    selection.name = "Prod Cluster"
    return selection


@pytest.fixture
def minimal_catalog_yaml() -> dict[str, Any]:
    """A small but complete catalog mapping."""
    return {
        "locations": [
            {"id": "us-e", "name": "New York", "region": "Americas", "flag": "🇺🇸"},
            {"id": "de", "name": "Frankfurt", "region": "Europe", "flag": "🇩🇪"},
        ],
        "plans": [
            {
                "id": "p-small",
                "name": "p-small",
                "category": "cloud_compute",
                "vcpu": 1,
                "ram": "1 GB",
                "disk": "25 GB NVMe",
                "bandwidth": "1 TB",
                "price": 5,
            }
        ],
        "images": [{"id": "debian", "name": "Debian", "type": "os", "versions": ["12"]}],
        "kubernetes_versions": ["v1.34.1+2"],
        "file_system_sizes": [10, 25],
    }


@pytest.fixture
def write_yaml(tmp_path: Path) -> Any:
    """Write a mapping (or raw text) to a YAML file under tmp_path."""
    import yaml

    def _write(content: dict[str, Any] | str, name: str = "catalog.yaml") -> Path:
        path = tmp_path / name
        text = content if isinstance(content, str) else yaml.safe_dump(content, allow_unicode=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
