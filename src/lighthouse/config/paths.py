"""Where lighthouse keeps its files.

The configuration lives under ``$XDG_CONFIG_HOME/lighthouse`` and the bridge
credentials under ``$XDG_DATA_HOME/lighthouse``; both fall back to the usual
locations in the home directory.
"""

from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "lighthouse"
CONFIG_FILENAME = "config.toml"
CREDENTIALS_FILENAME = "bridge"

_XDG_FALLBACKS = {
    "XDG_CONFIG_HOME": (".config",),
    "XDG_DATA_HOME": (".local", "share"),
}


def _xdg_base(variable: str) -> Path:
    value = os.environ.get(variable)
    if value:
        return Path(value)
    return Path.home().joinpath(*_XDG_FALLBACKS[variable])


def default_config_path() -> Path:
    return _xdg_base("XDG_CONFIG_HOME") / APP_NAME / CONFIG_FILENAME


def default_data_dir() -> Path:
    return _xdg_base("XDG_DATA_HOME") / APP_NAME


def expand_path(value: str | Path) -> Path:
    """Expand ``~`` and environment variables in a configured path."""
    return Path(os.path.expandvars(os.path.expanduser(str(value))))
