"""Print a kubeconfig for a cluster."""

from __future__ import annotations

import click


@click.command()
@click.argument("name")
@click.option("--token", default=None, help="Bearer token [default: a freshly generated one].")
@click.option("--endpoint", default=None, help="API server URL [default: derived from NAME].")
def kubeconfig(name: str, token: str | None, endpoint: str | None) -> None:
    """Print a kubeconfig document for cluster NAME to stdout."""
    from autonix_core.credentials import render_kubeconfig
    from autonix_core.ids import default_ids

    if token is None:
        token = f"new-token-{default_ids.next_stamp()}"
    click.echo(render_kubeconfig(name, token, endpoint), nl=False)
