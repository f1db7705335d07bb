from __future__ import annotations

from typing import Annotated

import typer

from lighthouse.cli.common import load_settings_or_exit, resolve_config_path_or_exit
from lighthouse.config import (
    Settings,
    credentials_path_from_settings,
    render_settings_toml,
    write_settings,
)
from lighthouse.storage import HOST_ENV_VAR, TOKEN_ENV_VAR, credentials_from_env

app = typer.Typer(no_args_is_help=True, help="Show or create the configuration file")


def _credentials_source(settings: Settings) -> str:
    if credentials_from_env() is not None:
        return f"environment ({HOST_ENV_VAR}, {TOKEN_ENV_VAR})"
    path = credentials_path_from_settings(settings)
    if path.exists():
        return str(path)
    return f"none (run 'lighthouse register' to create {path})"


@app.command("show")
def show_config() -> None:
    """Show the effective configuration and where credentials come from."""
    settings = load_settings_or_exit()
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    typer.echo(f"Config source: {path if exists else 'defaults'}")
    typer.echo(f"Credentials: {_credentials_source(settings)}")
    typer.echo()
    typer.echo(render_settings_toml(settings))


@app.command("path")
def config_path() -> None:
    """Print the configuration file location."""
    path, _ = resolve_config_path_or_exit(allow_missing=True)
    typer.echo(str(path))


@app.command("init")
def init_config(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file"),
    ] = False,
) -> None:
    """Write a config file holding the default settings."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)")
        return

    write_settings(Settings(), path)
    typer.echo(f"Wrote default config to {path}")
