"""Check whether a selection file is ready to submit.

Exit codes:
    0: Selection is ready
    1: Selection is not ready, or the file is invalid
    2: File not found
"""

from __future__ import annotations

from pathlib import Path

import click

from autonix_cli.commands._common import load_catalog, load_selection
from autonix_cli.errors import EXIT_USER_ERROR
from autonix_cli.output import error, success


@click.command()
@click.option(
    "--file",
    "-f",
    "file_path",
    type=click.Path(path_type=Path),
    default=Path("selection.yaml"),
    show_default=True,
    help="Path to the selection YAML file.",
)
@click.pass_context
def check(ctx: click.Context, file_path: Path) -> None:
    """Run the readiness gate against a selection.

    Prints one line per rule and exits with 1 when any rule fails.
    """
    from autonix_core.gate import check_readiness

    catalog = load_catalog(ctx)
    selection = load_selection(file_path, catalog)
    report = check_readiness(selection, catalog)

    for result in report.results:
        if result.passed:
            success(result.name)
        else:
            error(f"{result.name}: {result.message}")

    if report.ready:
        success(f"{file_path} is ready")
        return

    error(f"{file_path} is not ready")
    raise SystemExit(EXIT_USER_ERROR)
