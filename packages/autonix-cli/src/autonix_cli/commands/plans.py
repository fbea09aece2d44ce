"""List compute plans from the catalog."""

from __future__ import annotations

import click

from autonix_cli.commands._common import load_catalog
from autonix_cli.output import info, print_json, print_table

CATEGORY_CHOICES = ("all", "cloud_compute", "high_frequency", "high_performance")


@click.command()
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES),
    default="all",
    show_default=True,
    help="Plan category to list.",
)
@click.option("--search", default="", help="Case-insensitive substring of the plan name.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print plans as JSON.")
@click.pass_context
def plans(ctx: click.Context, category: str, search: str, as_json: bool) -> None:
    """List compute plans, filtered by category and name."""
    from autonix_core.resolver import filter_plans

    catalog = load_catalog(ctx)
    matching = filter_plans(catalog, category, search)

    if as_json:
        print_json([plan.model_dump(mode="json") for plan in matching])
        return

    if not matching:
        info("No plans match the given filters.")
        return

    print_table(
        "Plans",
        ("Plan", "Category", "vCPU", "RAM", "Disk", "Bandwidth", "Price/mo"),
        [
            (
                plan.name,
                plan.category.value,
                str(plan.vcpu),
                plan.ram,
                plan.disk,
                plan.bandwidth,
                f"${plan.price:.2f}",
            )
            for plan in matching
        ],
        numeric=("vCPU", "Price/mo"),
    )
