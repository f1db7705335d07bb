from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from lighthouse.config import Settings, get_settings, resolve_config_path
from lighthouse.core import BatchOutcome, Bridge
from lighthouse.errors import LighthouseError
from lighthouse.storage import HOST_ENV_VAR, TOKEN_ENV_VAR, resolve_credentials


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


@contextmanager
def exit_on_error() -> Iterator[None]:
    try:
        yield
    except (LighthouseError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc


def connect_or_exit(settings: Settings) -> Bridge:
    with exit_on_error():
        credentials = resolve_credentials(settings)
    if credentials is None:
        typer.echo(
            "No bridge credentials found. Run 'lighthouse register' or set "
            f"{HOST_ENV_VAR} and {TOKEN_ENV_VAR}.",
            err=True,
        )
        raise typer.Exit(1)

    with exit_on_error():
        bridge = Bridge.from_credentials(
            credentials, request_timeout=settings.transport.deadline
        )
    # A bridge that cannot be listed is a failed command, not an empty one.
    try:
        with exit_on_error():
            bridge.scan()
    except typer.Exit:
        bridge.close()
        raise
    return bridge


def report_outcome(outcome: BatchOutcome, console: Console) -> None:
    """Print which lights failed; exit with status 1 if any did."""
    if not len(outcome):
        console.print("[yellow]![/yellow] No lights to update")
        return

    problems: dict[int, str] = {
        light_id: str(error) for light_id, error in outcome.failures.items()
    }
    for light_id, response in outcome.succeeded.items():
        errors = response.api_errors()
        if errors:
            problems[light_id] = "; ".join(
                str(error.get("description", error)) for error in errors
            )

    if not problems:
        console.print(f"[green]✓[/green] Updated {len(outcome)} light(s)")
        return

    table = Table()
    table.add_column("Light", style="cyan")
    table.add_column("Error", style="red")
    for light_id, message in sorted(problems.items()):
        table.add_row(str(light_id), message)

    console.print(table)
    console.print(f"[red]{len(problems)} of {len(outcome)} light(s) failed[/red]")
    raise typer.Exit(1)
