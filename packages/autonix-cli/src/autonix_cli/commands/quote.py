"""Quote the monthly cost of a selection file."""

from __future__ import annotations

from pathlib import Path

import click

from autonix_cli.commands._common import load_catalog, load_selection
from autonix_cli.output import info, print_json, print_table


@click.command(name="quote")
@click.option(
    "--file",
    "-f",
    "file_path",
    type=click.Path(path_type=Path),
    default=Path("selection.yaml"),
    show_default=True,
    help="Path to the selection YAML file.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the quote as JSON.")
@click.pass_context
def quote_cmd(ctx: click.Context, file_path: Path, as_json: bool) -> None:
    """Show the itemized monthly cost and hourly rate of a selection."""
    from autonix_core.pricing import quote

    catalog = load_catalog(ctx)
    selection = load_selection(file_path, catalog)
    result = quote(selection, catalog)

    if as_json:
        print_json(
            {
                "kind": selection.kind,
                "items": [{"label": item.label, "amount": item.amount} for item in result.items],
                "total": result.monthly_display(),
                "hourly": result.hourly_display(),
            }
        )
        return

    rows = [(item.label, f"${item.amount:.2f}") for item in result.items]
    rows.append(("Total", f"${result.monthly_display()}"))
    print_table(f"Quote: {selection.kind}", ("Item", "Monthly"), rows, numeric=("Monthly",))
    info(f"Hourly: ${result.hourly_display()}/hr")
