from __future__ import annotations

import logging
import os

import coloredlogs  # type: ignore[import]

LEVEL_ENV_VAR = "LOGLEVEL"
DEFAULT_LEVEL = "INFO"
LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Third-party loggers that are chatty at INFO; kept at WARNING unless
# lighthouse itself runs at DEBUG.
NOISY_LOGGERS = ("aiohttp", "zeroconf")


def resolve_level(level: str | None = None) -> str:
    resolved = (level or os.environ.get(LEVEL_ENV_VAR) or DEFAULT_LEVEL).upper()
    if resolved not in LEVELS:
        raise ValueError(
            f"Unknown log level {resolved!r}, expected one of {', '.join(LEVELS)}"
        )
    return resolved


def setup_logging(level: str | None = None) -> None:
    resolved = resolve_level(level)

    coloredlogs.install(level=resolved, fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    library_level = logging.DEBUG if resolved == "DEBUG" else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)
