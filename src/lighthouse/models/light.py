"""Light records returned by the bridge's ``lights`` endpoint.

Bridges report two record shapes without any field telling them apart:
bulbs carry ``productid``/``swconfigid`` and full metadata, light strips a
reduced set. A record is matched against the bulb shape first and falls back
to the strip shape, which is a best-effort structural match rather than a
guaranteed classification.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from lighthouse.errors import DecodeError
from lighthouse.models.state import State


class _LightRecord(BaseModel):
    model_config = {"extra": "allow"}

    state: State
    type: str
    name: str
    modelid: str
    manufacturername: str
    uniqueid: str
    swversion: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the wire shape, without fields the source lacked."""
        return self.model_dump(mode="json", exclude_unset=True)

    def __str__(self) -> str:
        on = "true" if self.state.on else "false"
        return f"{{ on: {on} }} : {self.name}"


class LightBulb(_LightRecord):
    productname: str
    productid: str
    swconfigid: str
    swupdate: Any
    capabilities: Any
    config: Any


class LightStrip(_LightRecord):
    productname: str | None = None
    swupdate: Any = None
    capabilities: Any = None
    config: Any = None


Light = LightBulb | LightStrip


def parse_light(data: Any) -> Light:
    try:
        return LightBulb.model_validate(data)
    except ValidationError:
        pass
    try:
        return LightStrip.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(f"Unrecognised light record: {exc}") from exc


def _api_error_descriptions(data: list[Any]) -> list[str]:
    descriptions = []
    for entry in data:
        if isinstance(entry, dict) and isinstance(entry.get("error"), dict):
            descriptions.append(str(entry["error"].get("description", entry["error"])))
    return descriptions


def parse_inventory(data: Any) -> dict[int, Light]:
    """Decode a ``lights`` listing into a mapping ordered by light ID."""
    if isinstance(data, list):
        errors = _api_error_descriptions(data)
        if errors:
            raise DecodeError(f"Bridge returned an error: {'; '.join(errors)}")
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a mapping of lights, got {type(data).__name__}")

    lights: dict[int, Light] = {}
    for key, record in data.items():
        try:
            light_id = int(key)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Invalid light id: {key!r}") from exc
        if light_id < 1:
            raise DecodeError(f"Invalid light id: {key!r}")
        lights[light_id] = parse_light(record)

    return dict(sorted(lights.items()))
