"""Engine settings and catalog discovery for autonix-core.

This module handles:
- EngineSettings: operation delays and logging options (AUTONIX_* env vars)
- CatalogResolver: load catalog.yaml from an explicit path, the
  AUTONIX_CATALOG variable, standard search paths or the packaged default
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from autonix_core.catalog.models import Catalog
from autonix_core.errors import CatalogNotFoundError, ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable pointing at a catalog file
CATALOG_ENV_VAR = "AUTONIX_CATALOG"

# Standard catalog file name
CATALOG_FILE_NAME = "catalog.yaml"

# Standard locations to search for catalog.yaml
CATALOG_SEARCH_PATHS = (
    Path("."),
    Path(".autonix"),
    Path.home() / ".autonix",
)

# Catalog shipped inside the package
DEFAULT_CATALOG_PATH = Path(__file__).parent / "catalog" / CATALOG_FILE_NAME


class EngineSettings(BaseSettings):
    """Runtime settings for the console engine.

    Can be loaded from environment variables with the AUTONIX_ prefix.

    Example:
        >>> # AUTONIX_DEPLOY_DELAY=0 AUTONIX_LOG_FORMAT=json
        >>> settings = EngineSettings.from_env()
        >>> settings.deploy_delay
        0.0

        >>> # Instant operations for tests
        >>> settings = EngineSettings.instant()
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTONIX_",
        extra="ignore",
        frozen=True,
    )

    deploy_delay: float = Field(default=1.5, ge=0, description="Seconds a deploy takes")
    check_upgrade_delay: float = Field(
        default=1.5, ge=0, description="Seconds an upgrade availability check takes"
    )
    upgrade_delay: float = Field(
        default=2.0, ge=0, description="Seconds before a cluster enters Upgrading"
    )
    upgrade_revert_delay: float = Field(
        default=5.0, ge=0, description="Seconds a cluster stays in Upgrading"
    )
    regenerate_delay: float = Field(
        default=1.5, ge=0, description="Seconds a credential regeneration takes"
    )
    dashboard_delay: float = Field(
        default=2.0, ge=0, description="Seconds a dashboard install takes"
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    log_format: str = Field(default="console", pattern="^(console|json)$")

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Build settings from AUTONIX_* environment variables."""
        return cls()

    @classmethod
    def instant(cls) -> EngineSettings:
        """Settings with every simulated delay set to zero."""
        return cls(
            deploy_delay=0,
            check_upgrade_delay=0,
            upgrade_delay=0,
            upgrade_revert_delay=0,
            regenerate_delay=0,
            dashboard_delay=0,
        )


class CatalogResolver:
    """Resolves the catalog from explicit paths, environment and files.

    Attributes:
        search_paths: Ordered directories searched for catalog.yaml.

    Example:
        >>> catalog = CatalogResolver().load()
        >>> catalog = CatalogResolver().load(path=Path("custom/catalog.yaml"))
        >>> catalog = CatalogResolver.load_default()
    """

    _cache: ClassVar[dict[str, Catalog]] = {}

    def __init__(self, search_paths: tuple[Path, ...] | None = None) -> None:
        """Initialize the CatalogResolver.

        Args:
            search_paths: Custom search paths. If None, uses CATALOG_SEARCH_PATHS.
        """
        self.search_paths = search_paths if search_paths is not None else CATALOG_SEARCH_PATHS

    def _find_catalog_file(self) -> Path:
        """Find catalog.yaml.

        Order: AUTONIX_CATALOG, then each search path, then the packaged default.

        Raises:
            CatalogNotFoundError: If AUTONIX_CATALOG names a missing file, or
                no candidate (including the packaged default) exists.
        """
        env_value = os.environ.get(CATALOG_ENV_VAR)
        if env_value:
            env_path = Path(env_value)
            if not env_path.exists():
                raise CatalogNotFoundError(
                    f"Catalog file from {CATALOG_ENV_VAR} not found: {env_path}"
                )
            logger.debug("Using catalog from %s=%s", CATALOG_ENV_VAR, env_path)
            return env_path

        for base_path in self.search_paths:
            candidate = base_path / CATALOG_FILE_NAME
            if candidate.exists():
                logger.debug("Found catalog.yaml at %s", candidate)
                return candidate

        if DEFAULT_CATALOG_PATH.exists():
            logger.debug("No catalog.yaml found, using packaged default")
            return DEFAULT_CATALOG_PATH

        searched = [str(p / CATALOG_FILE_NAME) for p in self.search_paths]
        raise CatalogNotFoundError(f"Catalog not found. Searched: {', '.join(searched)}")

    def load(self, path: Path | None = None, use_cache: bool = True) -> Catalog:
        """Load and validate a catalog.

        Args:
            path: Explicit catalog path. If None, discovers one.
            use_cache: Whether to reuse a previously loaded catalog.

        Returns:
            Validated Catalog instance.

        Raises:
            CatalogNotFoundError: If no catalog file can be found.
            ConfigurationError: If the file is malformed or fails validation.
        """
        if path is not None:
            if not path.exists():
                raise CatalogNotFoundError(f"Catalog file not found: {path}")
            resolved_path = path.resolve()
        else:
            resolved_path = self._find_catalog_file().resolve()

        cache_key = str(resolved_path)

        if use_cache and cache_key in self._cache:
            logger.debug("Using cached catalog from %s", resolved_path)
            return self._cache[cache_key]

        logger.info("Loading catalog from %s", resolved_path)
        try:
            catalog = Catalog.from_yaml(resolved_path)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Catalog is not valid YAML",
                file_path=str(resolved_path),
                internal_details=str(e),
            ) from e
        except ValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field_path = ".".join(str(part) for part in first.get("loc", ()))
            raise ConfigurationError(
                f"Invalid catalog: {first.get('msg', 'validation failed')}",
                file_path=str(resolved_path),
                field_path=field_path or None,
                internal_details=str(e),
            ) from e

        self._cache[cache_key] = catalog
        return catalog

    @classmethod
    def clear_cache(cls) -> None:
        """Clear the catalog cache."""
        cls._cache.clear()
        logger.debug("Catalog resolver cache cleared")

    @classmethod
    def load_default(cls) -> Catalog:
        """Load the catalog using default discovery."""
        return cls().load()
