from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from lighthouse.cli.common import exit_on_error, load_settings_or_exit
from lighthouse.config import credentials_path_from_settings
from lighthouse.core import run_registration
from lighthouse.storage import Credentials, save_credentials


def register_bridge(
    save: Annotated[
        bool, typer.Option(help="Save the new credentials to the data directory")
    ] = True,
) -> None:
    """Register a new client with a bridge (press its link button)."""
    console = Console()
    settings = load_settings_or_exit()

    with exit_on_error():
        registration = run_registration(settings, interactive=True, console=console)

    console.print(f"Bridge: [cyan]{registration.host}[/cyan]")
    console.print(f"Token: {registration.token}")

    if save:
        path = credentials_path_from_settings(settings)
        save_credentials(
            Credentials(host=registration.host, token=registration.token), path
        )
        console.print(f"[green]✓[/green] Saved credentials to {path}")


def register(app: typer.Typer) -> None:
    app.command("register")(register_bridge)
