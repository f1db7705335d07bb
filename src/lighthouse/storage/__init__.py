from __future__ import annotations

from .credentials import (
    HOST_ENV_VAR,
    TOKEN_ENV_VAR,
    Credentials,
    credentials_from_env,
    load_credentials,
    resolve_credentials,
    save_credentials,
)

__all__ = [
    "Credentials",
    "HOST_ENV_VAR",
    "TOKEN_ENV_VAR",
    "credentials_from_env",
    "load_credentials",
    "resolve_credentials",
    "save_credentials",
]
