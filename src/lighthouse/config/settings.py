from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Literal, NamedTuple

from pydantic import BaseModel, Field, ValidationError

from .paths import (
    CREDENTIALS_FILENAME,
    default_config_path,
    default_data_dir,
    expand_path,
)

CONFIG_ENV_VAR = "LIGHTHOUSE_CONFIG"


class StorageConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class DiscoveryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    method: Literal["ssdp", "mdns"] = "ssdp"
    timeout: float = Field(default=5.0, gt=0)
    search_target: str = "urn:schemas-upnp-org:device:Basic:1"
    mx: int = Field(default=5, ge=1, le=120)


class RegistrationConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    devicetype: str = Field(default="lighthouse", min_length=1, max_length=40)
    interval: float = Field(default=3.0, gt=0)
    max_attempts: int | None = Field(default=None, ge=1)


class TransportConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    # 0 disables the per-request deadline.
    request_timeout: float = Field(default=10.0, ge=0)

    @property
    def deadline(self) -> float | None:
        return self.request_timeout or None


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)


class ConfigLocation(NamedTuple):
    path: Path
    exists: bool


def resolve_config_path(allow_missing: bool = False) -> ConfigLocation:
    """Locate the config file; ``LIGHTHOUSE_CONFIG`` wins over the XDG default.

    A file named explicitly through the environment must exist unless
    ``allow_missing`` is set.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    path = expand_path(override) if override else default_config_path()
    exists = path.is_file()
    if override and not exists and not allow_missing:
        raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
    return ConfigLocation(path, exists)


def load_settings(path: Path) -> Settings:
    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    location = resolve_config_path()
    return load_settings(location.path) if location.exists else Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.storage.path)


def credentials_path_from_settings(settings: Settings) -> Path:
    return data_dir_from_settings(settings) / CREDENTIALS_FILENAME


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        # JSON string escapes are valid TOML basic strings
        return json.dumps(value)
    return repr(value)


def render_settings_toml(settings: Settings) -> str:
    """Render ``settings`` as TOML, one table per section.

    TOML has no null, so unset optional values are left out.
    """
    lines = ["# lighthouse configuration"]
    for section, values in settings.model_dump(exclude_none=True).items():
        lines += ["", f"[{section}]"]
        lines += [f"{key} = {_toml_value(value)}" for key, value in values.items()]
    lines.append("")
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
