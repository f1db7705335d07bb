from __future__ import annotations

from .bridge import Bridge, run_registration
from .discovery import discover, find_bridges, find_bridges_mdns
from .dispatch import BatchOutcome, dispatch
from .network import (
    AllowedMethod,
    RequestTarget,
    Response,
    Transport,
    generate_target,
    light_state_path,
    resolve,
)
from .registration import Registration, register

__all__ = [
    "AllowedMethod",
    "BatchOutcome",
    "Bridge",
    "Registration",
    "RequestTarget",
    "Response",
    "Transport",
    "discover",
    "dispatch",
    "find_bridges",
    "find_bridges_mdns",
    "generate_target",
    "light_state_path",
    "register",
    "resolve",
    "run_registration",
]
