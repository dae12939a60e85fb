# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Jeff Culverhouse
import math
from enum import StrEnum
from typing import NamedTuple, Sequence


class ColorMode(StrEnum):
    RGB = "rgb"
    RGBW = "rgbw"


class HSV(NamedTuple):
    h: int  # degrees, 0-359
    s: int  # percent
    v: int  # percent


def clamp(value: float, min_value: float, max_value: float) -> float:
    return min(max_value, max(min_value, value))


def round_half_up(value: float) -> int:
    # round() would round half to even, the device side expects 0.5 -> 1
    return int(math.floor(value + 0.5))


def rgb_to_hsv(rgb: Sequence[float]) -> HSV:
    """Project an RGB triple (0-255 per channel) onto integer hue/saturation/value.

    Channels outside 0-255 are clamped. Achromatic input (all channels equal)
    yields hue 0, and pure black yields saturation 0.
    """
    r = clamp(rgb[0], 0, 255) / 255
    g = clamp(rgb[1], 0, 255) / 255
    b = clamp(rgb[2], 0, 255) / 255

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    h = 0
    if delta != 0:
        if max_c == r:
            sector = math.fmod((g - b) / delta, 6)
        elif max_c == g:
            sector = (b - r) / delta + 2
        else:
            sector = (r - g) / delta + 4
        h = round_half_up(sector * 60)
        if h < 0:
            h += 360

    s = 0.0 if max_c == 0 else delta / max_c

    return HSV(h=h, s=round_half_up(s * 100), v=round_half_up(max_c * 100))


def hsv_to_rgb(h: float, s: float, v: float) -> list[int]:
    """Convert hue (degrees), saturation and value (percent) into an RGB list."""
    hue = h % 360
    sat = clamp(s, 0, 100) / 100
    val = clamp(v, 0, 100) / 100

    c = val * sat
    x = c * (1 - abs(((hue / 60) % 2) - 1))
    m = val - c

    if hue < 60:
        r1, g1, b1 = c, x, 0.0
    elif hue < 120:
        r1, g1, b1 = x, c, 0.0
    elif hue < 180:
        r1, g1, b1 = 0.0, c, x
    elif hue < 240:
        r1, g1, b1 = 0.0, x, c
    elif hue < 300:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x

    return [
        round_half_up((r1 + m) * 255),
        round_half_up((g1 + m) * 255),
        round_half_up((b1 + m) * 255),
    ]
