from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError

from lighthouse.errors import DecodeError

Chromaticity = Annotated[float, Field(ge=0.0, le=1.0)]

DEFAULT_TRANSITION_TIME = 1


class State(BaseModel):
    """The ``state`` part of a light record as reported by the bridge."""

    model_config = {"extra": "allow"}

    on: bool
    bri: int | None = None
    hue: int | None = None
    sat: int | None = None
    effect: str | None = None
    xy: tuple[float, float] | None = None
    ct: int | None = None
    alert: str | None = None
    colormode: str | None = None
    mode: str | None = None
    reachable: bool | None = None


class SendableState(BaseModel):
    """Sparse desired state for a light.

    Only the attributes that are set are sent to the bridge, so everything
    left as ``None`` stays unchanged on the light. ``transitiontime`` is set
    to 1 unless given explicitly.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    on: bool | None = None
    bri: int | None = Field(default=None, ge=0, le=254)
    hue: int | None = Field(default=None, ge=0, le=65535)
    sat: int | None = Field(default=None, ge=0, le=254)
    effect: str | None = None
    xy: tuple[Chromaticity, Chromaticity] | None = None
    alert: str | None = None
    transitiontime: int | None = Field(default=DEFAULT_TRANSITION_TIME, ge=0)
    colormode: str | None = None

    @classmethod
    def from_state(cls, state: State, **overrides: Any) -> SendableState:
        """Build a payload that reproduces ``state``, then apply ``overrides``."""
        fields: dict[str, Any] = {
            "on": state.on,
            "bri": state.bri,
            "hue": state.hue,
            "sat": state.sat,
            "effect": state.effect,
            "xy": state.xy,
            "colormode": state.colormode,
        }
        fields.update(overrides)
        return cls.model_validate(fields)

    @classmethod
    def from_json(cls, text: str | bytes) -> SendableState:
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise DecodeError(f"Invalid state: {exc}") from exc

    def with_changes(self, **changes: Any) -> SendableState:
        return type(self).model_validate({**self.model_dump(), **changes})

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
