from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from lighthouse.cli.common import (
    connect_or_exit,
    exit_on_error,
    load_settings_or_exit,
    report_outcome,
)
from lighthouse.colors import hex_to_rgb, rgb_to_xy
from lighthouse.models import SendableState

LightsOption = Annotated[
    list[int] | None,
    typer.Option("--light", "-l", help="Only target this light id (repeatable)"),
]


def send_state(state: SendableState, lights: list[int] | None) -> None:
    settings = load_settings_or_exit()
    console = Console()

    with connect_or_exit(settings) as bridge, exit_on_error():
        if lights:
            outcome = bridge.state_to_multiple(lights, [state] * len(lights))
        else:
            outcome = bridge.state_to_all(state)

    report_outcome(outcome, console)


def on(lights: LightsOption = None) -> None:
    """Turn lights on at full brightness."""
    send_state(SendableState(on=True, bri=254), lights)


def off(lights: LightsOption = None) -> None:
    """Turn lights off."""
    send_state(SendableState(on=False), lights)


def colorloop(lights: LightsOption = None) -> None:
    """Set lights to colorloop."""
    send_state(SendableState(on=True, effect="colorloop"), lights)


def brightness(
    value: Annotated[int, typer.Argument(min=0, max=254, help="Brightness (0-254)")],
    lights: LightsOption = None,
) -> None:
    """Set brightness (turns lights on if off)."""
    send_state(SendableState(on=True, bri=value), lights)


def color(
    red: Annotated[int | None, typer.Argument(min=0, max=255, help="Red (0-255)")] = None,
    green: Annotated[int | None, typer.Argument(min=0, max=255, help="Green (0-255)")] = None,
    blue: Annotated[int | None, typer.Argument(min=0, max=255, help="Blue (0-255)")] = None,
    hex_value: Annotated[
        str | None, typer.Option("--hex", help="Colour as hex, e.g. '#ff8800'")
    ] = None,
    lights: LightsOption = None,
) -> None:
    """Set lights to an RGB colour."""
    if hex_value is not None:
        with exit_on_error():
            red, green, blue = hex_to_rgb(hex_value)
    elif red is None or green is None or blue is None:
        typer.echo("Provide RED GREEN BLUE or --hex", err=True)
        raise typer.Exit(1)

    xy = rgb_to_xy(red, green, blue)
    send_state(SendableState(on=True, colormode="xy", xy=xy), lights)


def state(
    text: Annotated[
        str | None, typer.Argument(help='State as JSON, e.g. \'{"on": true}\'')
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Read the state from a file (ignores STATE)"),
    ] = None,
    lights: LightsOption = None,
) -> None:
    """Send a JSON state to lights."""
    if file is not None:
        with exit_on_error():
            try:
                text = file.read_text()
            except OSError as exc:
                raise ValueError(f"Could not read {file}: {exc}") from exc
    if text is None:
        typer.echo("Provide a STATE or --file", err=True)
        raise typer.Exit(1)

    with exit_on_error():
        new_state = SendableState.from_json(text)
    send_state(new_state, lights)


def register(app: typer.Typer) -> None:
    app.command()(on)
    app.command()(off)
    app.command("loop")(colorloop)
    app.command("bri")(brightness)
    app.command()(color)
    app.command()(state)
