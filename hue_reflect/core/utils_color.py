"""Color utility helpers for single pixels.

These are the per-pixel reference conversions. The row transform in
:mod:`hue_reflect.core.utils_image` mirrors them operation for operation.
Hue is expressed in degrees in ``[0, 360)``, saturation and value in percent.
"""
from __future__ import annotations

import math
from typing import Sequence, Tuple

ColorTuple = Tuple[int, int, int]
RGBATuple = Tuple[int, int, int, int]
HSVTuple = Tuple[float, float, float]


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp *value* between *min_value* and *max_value*."""

    return max(min_value, min(max_value, value))


def wrap_hue(hue: float) -> float:
    """Wrap *hue* into ``[0, 360)``."""

    wrapped = hue % 360.0
    # Float modulo of a tiny negative number rounds up to the modulus itself.
    if wrapped >= 360.0:
        wrapped -= 360.0
    return wrapped


def normalize_axis(angle: float) -> float:
    """Fold a reflection angle into ``[0, 180)``.

    Mirroring about ``a`` and ``a + 180`` gives the same result, so only half
    the circle is meaningful.
    """

    angle = float(angle)
    if not math.isfinite(angle):
        raise ValueError(f"Reflection angle must be finite, got {angle!r}")
    folded = angle % 180.0
    if folded >= 180.0:
        folded -= 180.0
    return folded


def _channel_to_byte(channel: float) -> int:
    return int(clamp(math.floor(channel * 255.0 + 0.5), 0, 255))


def rgb_to_hsv(color: Sequence[int]) -> HSVTuple:
    """Convert an 8-bit RGB color to ``(hue, saturation, value)``.

    Only the first three channels are read, so RGBA tuples are accepted.
    Pure black yields a saturation of ``0``.
    """

    r, g, b = (int(c) for c in color[:3])
    for channel in (r, g, b):
        if not 0 <= channel <= 255:
            raise ValueError("RGB components must be integers in 0..255")

    top = max(r, g, b)
    bottom = min(r, g, b)
    red, green, blue = r / 255.0, g / 255.0, b / 255.0
    high = top / 255.0
    chroma = high - bottom / 255.0

    value = high * 100.0
    saturation = (chroma / high) * 100.0 if top > 0 else 0.0

    if top == bottom:
        hue_prime = 0.0
    elif r == top:
        hue_prime = (green - blue) / chroma
    elif g == top:
        hue_prime = 2.0 + (blue - red) / chroma
    else:
        hue_prime = 4.0 + (red - green) / chroma

    hue = hue_prime * 60.0
    if hue < 0.0:
        hue += 360.0
    return hue, saturation, value


def hsv_to_rgb(hsv: Sequence[float]) -> ColorTuple:
    """Convert ``(hue, saturation, value)`` back to an 8-bit RGB color.

    Channels are rounded half up, not truncated.
    """

    hue = wrap_hue(float(hsv[0]))
    saturation = float(hsv[1]) / 100.0
    value = float(hsv[2]) / 100.0
    chroma = saturation * value
    low = value - chroma
    hue_prime = (hue - 360.0) / 60.0 if hue >= 300.0 else hue / 60.0

    if hue_prime < 0.0:
        rgb = (value, low, low - hue_prime * chroma)
    elif hue_prime < 1.0:
        rgb = (value, low + hue_prime * chroma, low)
    elif hue_prime < 2.0:
        rgb = (low - (hue_prime - 2.0) * chroma, value, low)
    elif hue_prime < 3.0:
        rgb = (low, value, low + (hue_prime - 2.0) * chroma)
    elif hue_prime < 4.0:
        rgb = (low, low - (hue_prime - 4.0) * chroma, value)
    else:
        rgb = (low + (hue_prime - 4.0) * chroma, low, value)
    return tuple(_channel_to_byte(channel) for channel in rgb)  # type: ignore[return-value]


def reflect_hue(hue: float, axis: float) -> float:
    """Mirror *hue* about *axis*, returning a hue in ``[0, 360)``."""

    angle = wrap_hue(hue - axis)
    angle = 360.0 - angle
    angle += axis
    return wrap_hue(angle)


def reflect_hsv(hsv: Sequence[float], axis: float) -> HSVTuple:
    """Reflect the hue of *hsv*; saturation and value pass through."""

    return reflect_hue(hsv[0], axis), float(hsv[1]), float(hsv[2])


def reflect_pixel(pixel: Sequence[int], axis: float) -> RGBATuple:
    """Reflect one RGBA pixel, carrying its alpha through unchanged.

    RGB pixels without alpha are treated as fully opaque.
    """

    alpha = int(pixel[3]) if len(pixel) > 3 else 255
    r, g, b = hsv_to_rgb(reflect_hsv(rgb_to_hsv(pixel), axis))
    return r, g, b, alpha
