"""Tint/shade calculation used by the edge bands."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Tuple

RGB = Tuple[float, float, float]  # channels in 0..1
HSL = Tuple[float, float, float]  # hue in degrees, saturation and lightness in 0..1

TINT_LIGHTEN = 0.30
SHADE_DARKEN = 0.25

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True)
class Harmony:
    tint: str
    shade: str


def parse_hex_color(value: str) -> RGB:
    """Decode `#rrggbb` (or `#rgb`) into 0..1 channels; raise ValueError otherwise."""
    match = _HEX_RE.match((value or "").strip())
    if not match:
        raise ValueError(f"Not a hex color: {value!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return tuple(int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))  # type: ignore[return-value]


def rgb_to_hsl(rgb: RGB) -> HSL:
    r, g, b = rgb
    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2
    if high == low:
        return (0.0, 0.0, lightness)

    delta = high - low
    saturation = delta / (1 - abs(2 * lightness - 1))
    if high == r:
        hue = 60 * (((g - b) / delta) % 6)
    elif high == g:
        hue = 60 * (((b - r) / delta) + 2)
    else:
        hue = 60 * (((r - g) / delta) + 4)
    return (hue, saturation, lightness)


def hsl_to_rgb(hsl: HSL) -> RGB:
    hue, saturation, lightness = hsl
    chroma = (1 - abs(2 * lightness - 1)) * saturation
    sector = (hue % 360) / 60
    x = chroma * (1 - abs(sector % 2 - 1))
    if sector < 1:
        r, g, b = chroma, x, 0.0
    elif sector < 2:
        r, g, b = x, chroma, 0.0
    elif sector < 3:
        r, g, b = 0.0, chroma, x
    elif sector < 4:
        r, g, b = 0.0, x, chroma
    elif sector < 5:
        r, g, b = x, 0.0, chroma
    else:
        r, g, b = chroma, 0.0, x
    m = lightness - chroma / 2
    return (r + m, g + m, b + m)


def _channel_byte(value: float) -> int:
    # Round half up like the editor did, clamp float drift
    return max(0, min(255, int(math.floor(value * 255 + 0.5))))


def rgb_to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{_channel_byte(c):02x}" for c in rgb)


def harmony(hex_color: str) -> Harmony:
    """Return a lighter tint and a darker shade of `hex_color` with the same hue and saturation."""
    hue, saturation, lightness = rgb_to_hsl(parse_hex_color(hex_color))
    tint_l = min(lightness + TINT_LIGHTEN, 1.0)
    shade_l = max(lightness - SHADE_DARKEN, 0.0)
    return Harmony(
        tint=rgb_to_hex(hsl_to_rgb((hue, saturation, tint_l))),
        shade=rgb_to_hex(hsl_to_rgb((hue, saturation, shade_l))),
    )
