"""CLI entry point for autonix.

Defines the main CLI group using the LazyGroup pattern so that
``autonix --help`` does not import the engine.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from autonix_cli import __version__
from autonix_cli.output import set_no_color

# Help rendering
rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Group whose subcommands are imported on first lookup.

    ``lazy_subcommands`` maps a command name to a dotted ``module.attribute``
    path. Resolved commands are kept so each module is imported once.
    """

    def __init__(
        self, *args: Any, lazy_subcommands: dict[str, str] | None = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        eager = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if eager is not None or cmd_name not in self.lazy_subcommands:
            return eager
        command = self._import_command(self.lazy_subcommands[cmd_name])
        self.add_command(command, cmd_name)
        return command

    @staticmethod
    def _import_command(target: str) -> click.Command:
        module_path, _, attribute = target.rpartition(".")
        command = getattr(importlib.import_module(module_path), attribute)
        if not isinstance(command, click.Command):
            raise TypeError(f"{target} is not a click command")
        return command


LAZY_COMMANDS = {
    "plans": "autonix_cli.commands.plans.plans",
    "quote": "autonix_cli.commands.quote.quote_cmd",
    "check": "autonix_cli.commands.check.check",
    "kubeconfig": "autonix_cli.commands.kubeconfig.kubeconfig",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="autonix")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="AUTONIX_CATALOG",
    help="Path to catalog.yaml [default: discovered, then packaged catalog]",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logs.")
@click.pass_context
def cli(ctx: click.Context, catalog_path: str | None, verbose: bool) -> None:
    """Autonix - cloud console resource engine.

    Price, validate and assemble infrastructure selections from the command line.

    **Getting Started:**

    - `autonix plans --category high_frequency` - Browse compute plans
    - `autonix quote -f server.yaml` - Itemized monthly cost of a selection
    - `autonix check -f server.yaml` - Readiness report of a selection
    - `autonix kubeconfig my-cluster` - Print a cluster kubeconfig
    """
    from autonix_core.observability import configure_logging

    configure_logging(log_level="DEBUG" if verbose else "WARNING", json_format=False)
    ctx.ensure_object(dict)
    ctx.obj["catalog_path"] = catalog_path


if __name__ == "__main__":
    cli()
