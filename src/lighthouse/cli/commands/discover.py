from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console

from lighthouse.cli.common import exit_on_error, load_settings_or_exit
from lighthouse.core import discover as discover_bridges

logger = logging.getLogger(__name__)


def discover() -> None:
    """Discover bridges on the local network."""
    console = Console()
    settings = load_settings_or_exit()

    console.print(
        f"Searching for bridges via {settings.discovery.method.upper()} "
        f"({settings.discovery.timeout:g}s)..."
    )
    logger.info("Discovery settings: %s", settings.discovery)
    with exit_on_error():
        addresses = asyncio.run(discover_bridges(settings.discovery))

    if not addresses:
        console.print("No bridges found.")
        return

    for address in addresses:
        console.print(f"  [cyan]{address}[/cyan]")
    console.print(f"\n[green]Found {len(addresses)} bridge(s)[/green]")


def register(app: typer.Typer) -> None:
    app.command()(discover)
