from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field

from lighthouse.config import Settings, credentials_path_from_settings

logger = logging.getLogger(__name__)

HOST_ENV_VAR = "HUE_BRIDGE_IP"
TOKEN_ENV_VAR = "HUE_BRIDGE_KEY"


class Credentials(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    host: str = Field(min_length=1)
    token: str = Field(min_length=1)


def save_credentials(credentials: Credentials, path: Path) -> None:
    """Write ``host`` and ``token`` as two lines."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{credentials.host}\n{credentials.token}\n")
    path.chmod(0o600)


def load_credentials(path: Path) -> Credentials | None:
    if not path.exists():
        return None

    lines = [line.strip() for line in path.read_text().splitlines() if line.strip()]
    if len(lines) != 2:
        raise ValueError(
            f"Invalid credentials file: {path}\n"
            f"expected 2 lines (host, token), found {len(lines)}"
        )
    return Credentials(host=lines[0], token=lines[1])


def credentials_from_env() -> Credentials | None:
    host = os.environ.get(HOST_ENV_VAR)
    token = os.environ.get(TOKEN_ENV_VAR)
    if not host or not token:
        return None
    return Credentials(host=host, token=token)


def resolve_credentials(settings: Settings) -> Credentials | None:
    """Environment variables first, then the credentials file."""
    credentials = credentials_from_env()
    if credentials is not None:
        logger.debug("Using bridge credentials from environment")
        return credentials

    path = credentials_path_from_settings(settings)
    credentials = load_credentials(path)
    if credentials is not None:
        logger.debug("Using bridge credentials from %s", path)
    return credentials
