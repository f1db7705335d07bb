from __future__ import annotations

from typing import Annotated

import typer

from lighthouse.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands.discover import register as register_discover
from .commands.inventory import register as register_inventory
from .commands.lights import register as register_lights
from .commands.register import register as register_registration

app = typer.Typer(
    help="lighthouse - light automation from the comfort of your keyboard",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_lights(app)
register_inventory(app)
register_discover(app)
register_registration(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG, INFO, WARNING, ...); defaults to $LOGLEVEL or INFO",
        ),
    ] = None,
) -> None:
    """lighthouse CLI."""
    try:
        setup_logging(log_level)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(2) from exc

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"lighthouse version {get_version('lighthouse')}")
        raise typer.Exit()
