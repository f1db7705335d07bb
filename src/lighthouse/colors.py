"""Conversions from RGB and hex colours to what the bridge understands.

``xy`` follows the wide-gamut conversion commonly used for these lights
(https://gist.github.com/popcorn245/30afa0f98eea1c2fd34d); no gamut
clipping is applied.
"""

from __future__ import annotations

import colorsys
import string

RGB = tuple[int, int, int]


def _linearize(channel: float) -> float:
    if channel > 0.04045:
        return ((channel + 0.055) / (1.0 + 0.055)) ** 2.4
    return channel / 12.92


def _check_rgb(red: int, green: int, blue: int) -> None:
    for value in (red, green, blue):
        if not 0 <= value <= 255:
            raise ValueError(f"RGB component out of range 0-255: {value}")


def rgb_to_xy(red: int, green: int, blue: int) -> tuple[float, float]:
    _check_rgb(red, green, blue)
    r, g, b = (_linearize(value / 255.0) for value in (red, green, blue))

    x = r * 0.664511 + g * 0.154324 + b * 0.162028
    y = r * 0.283881 + g * 0.668433 + b * 0.047685
    z = r * 0.000088 + g * 0.072310 + b * 0.986039
    total = x + y + z
    if total == 0:
        # black has no chromaticity
        return (0.0, 0.0)
    return (x / total, y / total)


def rgb_to_hsl(red: int, green: int, blue: int) -> tuple[int, int, int]:
    """Return ``(hue, sat, lightness)`` scaled to 0-65535, 0-254, 0-254."""
    _check_rgb(red, green, blue)
    hue, lightness, saturation = colorsys.rgb_to_hls(red / 255.0, green / 255.0, blue / 255.0)
    return (
        int(hue * 65535),
        int(saturation * 254),
        int(lightness * 254),
    )


def hex_to_rgb(value: str) -> RGB:
    text = value.strip().removeprefix("#")
    if len(text) != 6 or not all(char in string.hexdigits for char in text):
        raise ValueError(f"Expected a 6 digit hex colour, got {value!r}")
    red, green, blue = (int(text[i : i + 2], 16) for i in range(0, 6, 2))
    return (red, green, blue)


def hex_to_hsl(value: str) -> tuple[int, int, int]:
    return rgb_to_hsl(*hex_to_rgb(value))
