from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.table import Table

from lighthouse.cli.common import connect_or_exit, exit_on_error, load_settings_or_exit


def list_lights() -> None:
    """List the lights known to the bridge."""
    settings = load_settings_or_exit()
    with connect_or_exit(settings) as bridge:
        lights = bridge.lights

    console = Console()
    if not lights:
        console.print("No lights found.")
        return

    table = Table()
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("On")
    table.add_column("Type")
    table.add_column("Model")

    for light_id, light in lights.items():
        table.add_row(
            str(light_id),
            light.name,
            "yes" if light.state.on else "no",
            light.type,
            light.modelid,
        )

    console.print(table)
    console.print(f"\n[green]Found {len(lights)} light(s)[/green]")


def info() -> None:
    """Print the bridge's raw light listing as JSON."""
    settings = load_settings_or_exit()
    with connect_or_exit(settings) as bridge, exit_on_error():
        data = bridge.system_info()
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


def register(app: typer.Typer) -> None:
    app.command("lights")(list_lights)
    app.command()(info)
