"""lighthouse - control networked lights through their local bridge."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import BatchOutcome, Bridge, dispatch, find_bridges, register
from .errors import (
    BatchError,
    ConstructionError,
    DecodeError,
    DiscoveryError,
    LighthouseError,
    RegistrationError,
    RegistrationTimeoutError,
    TransportError,
)
from .models import Light, LightBulb, LightStrip, SendableState, State
from .storage import Credentials

__all__ = [
    "BatchError",
    "BatchOutcome",
    "Bridge",
    "ConstructionError",
    "Credentials",
    "DecodeError",
    "DiscoveryError",
    "Light",
    "LightBulb",
    "LightStrip",
    "LighthouseError",
    "RegistrationError",
    "RegistrationTimeoutError",
    "SendableState",
    "Settings",
    "State",
    "TransportError",
    "__version__",
    "dispatch",
    "find_bridges",
    "get_settings",
    "register",
]

__version__ = version("lighthouse")
