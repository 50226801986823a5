"""
Color space conversions for palette swatches.

Pure functions mapping RGB to hex and HSL, plus WCAG relative luminance.
Channel values are validated, never clamped: anything that is not an integer
in [0, 255] raises InvalidChannel.
"""

import math
import numbers
import re
from typing import NamedTuple, Sequence, Tuple

from palette_studio.errors import InvalidChannel

_HEX_PATTERN = re.compile(r"^#?([0-9A-Fa-f]{6})$")


class HSL(NamedTuple):
    """Hue in degrees [0, 360), saturation and lightness in percent [0, 100]."""
    h: int
    s: int
    l: int


def _validate_channel(name: str, value) -> int:
    if not isinstance(value, numbers.Integral):
        raise InvalidChannel(f"Channel {name} must be an integer, got {type(value).__name__}")
    value = int(value)
    if not 0 <= value <= 255:
        raise InvalidChannel(f"Channel {name}={value} outside [0, 255]")
    return value


def validate_rgb(r, g, b) -> Tuple[int, int, int]:
    """Validate an RGB triple and return it as plain ints."""
    return _validate_channel("r", r), _validate_channel("g", g), _validate_channel("b", b)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rgb_to_hex(r, g, b) -> str:
    """Convert RGB channels to an uppercase #RRGGBB string."""
    r, g, b = validate_rgb(r, g, b)
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert a #RRGGBB (or RRGGBB) string to an RGB tuple."""
    match = _HEX_PATTERN.match(hex_color) if isinstance(hex_color, str) else None
    if match is None:
        raise InvalidChannel(f"Invalid hex color: {hex_color!r}")
    digits = match.group(1)
    return tuple(int(digits[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hsl(r, g, b) -> HSL:
    """
    Convert RGB channels to integer HSL.

    Achromatic colors (max == min) get h = s = 0. The hue branch is chosen by
    the channel holding the maximum, checking red, then green, then blue.
    All three components are rounded half-up; a hue that rounds to 360 wraps
    to 0.
    """
    r, g, b = validate_rgb(r, g, b)
    rn, gn, bn = r / 255, g / 255, b / 255
    c_max = max(rn, gn, bn)
    c_min = min(rn, gn, bn)
    lightness = (c_max + c_min) / 2

    if c_max == c_min:
        hue = saturation = 0.0
    else:
        d = c_max - c_min
        saturation = d / (2 - c_max - c_min) if lightness > 0.5 else d / (c_max + c_min)
        if c_max == rn:
            hue = (gn - bn) / d + (6 if gn < bn else 0)
        elif c_max == gn:
            hue = (bn - rn) / d + 2
        else:
            hue = (rn - gn) / d + 4
        hue /= 6

    return HSL(
        h=_round_half_up(hue * 360) % 360,
        s=_round_half_up(saturation * 100),
        l=_round_half_up(lightness * 100)
    )


def _linearize(channel: int) -> float:
    v = channel / 255
    return v / 12.92 if v <= 0.03928 else ((v + 0.055) / 1.055) ** 2.4


def relative_luminance(r, g, b) -> float:
    """WCAG relative luminance in [0, 1]."""
    r, g, b = validate_rgb(r, g, b)
    return _linearize(r) * 0.2126 + _linearize(g) * 0.7152 + _linearize(b) * 0.0722


def contrast_ratio(first: Sequence[int], second: Sequence[int]) -> float:
    """WCAG contrast ratio between two RGB triples, in [1, 21]."""
    l1 = relative_luminance(*first)
    l2 = relative_luminance(*second)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)
