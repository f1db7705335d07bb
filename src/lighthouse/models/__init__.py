"""Data models for lighthouse."""

from lighthouse.models.light import (
    Light,
    LightBulb,
    LightStrip,
    parse_inventory,
    parse_light,
)
from lighthouse.models.state import SendableState, State

__all__ = [
    "Light",
    "LightBulb",
    "LightStrip",
    "SendableState",
    "State",
    "parse_inventory",
    "parse_light",
]
