"""Shared helpers for commands that read the catalog or a selection file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from autonix_cli.errors import (
    CLIError,
    handle_file_not_found,
    handle_validation_error,
    handle_yaml_error,
)

if TYPE_CHECKING:
    from autonix_core.catalog import Catalog
    from autonix_core.selection import SelectionBase


def load_catalog(ctx: click.Context) -> Catalog:
    """Load the catalog named by ``--catalog``, or the discovered one."""
    from autonix_core.config import CatalogResolver
    from autonix_core.errors import AutonixError

    catalog_path = (ctx.find_root().obj or {}).get("catalog_path")
    try:
        return CatalogResolver().load(Path(catalog_path) if catalog_path else None)
    except AutonixError as e:
        raise CLIError(e.user_message) from e


def load_selection(file_path: Path, catalog: Catalog) -> SelectionBase:
    """Read a selection YAML file.

    Creation kinds start from the wizard defaults, so the file only needs
    the fields it changes. Resize and delete files are taken as written.
    """
    import yaml
    from pydantic import ValidationError

    from autonix_core.builder import SELECTION_FACTORIES
    from autonix_core.selection import parse_selection

    if not file_path.exists():
        handle_file_not_found(str(file_path))

    try:
        with file_path.open() as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        handle_yaml_error(e, str(file_path))

    if not isinstance(data, dict) or "kind" not in data:
        raise CLIError(f"Invalid selection in {file_path}: expected a mapping with a 'kind' key")

    factory = SELECTION_FACTORIES.get(data["kind"])
    if factory is not None:
        data = {**factory(catalog).model_dump(), **data}

    try:
        return parse_selection(data)
    except ValidationError as e:
        handle_validation_error(e, str(file_path))
