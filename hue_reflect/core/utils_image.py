"""Image utility helpers for pixel grids and array color space conversions.

The array functions follow :mod:`hue_reflect.core.utils_color` operation for
operation, so a row converted here matches the pixel-by-pixel result exactly.
"""
from __future__ import annotations

import numpy as np
from PIL import Image


def to_rgba_array(image: Image.Image | np.ndarray) -> np.ndarray:
    """Return *image* as a ``(height, width, 4)`` ``uint8`` grid.

    Pillow images of any mode are converted to RGBA first. Arrays must already
    be RGBA (four channels) or RGB (three channels, treated as opaque).
    """

    if isinstance(image, Image.Image):
        return np.array(image.convert("RGBA"), dtype=np.uint8)

    array = np.asarray(image)
    if array.ndim != 3 or array.shape[-1] not in (3, 4):
        raise ValueError(f"Expected a (height, width, 3|4) pixel grid, got shape {array.shape}")
    if array.dtype != np.uint8:
        if array.size and (array.min() < 0 or array.max() > 255):
            raise ValueError("Pixel grid values must lie in 0..255")
        array = array.astype(np.uint8)
    if array.shape[-1] == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        array = np.concatenate((array, alpha), axis=-1)
    return array


def from_rgba_array(array: np.ndarray) -> Image.Image:
    """Wrap an RGBA grid into a Pillow image."""

    return Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))


def wrap_hue_array(hue: np.ndarray) -> np.ndarray:
    """Wrap hues into ``[0, 360)``."""

    wrapped = np.mod(hue, 360.0)
    return np.where(wrapped >= 360.0, wrapped - 360.0, wrapped)


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """Convert ``(..., 3)`` 8-bit RGB values to ``(..., 3)`` HSV floats."""

    channels = np.asarray(rgb)[..., :3].astype(np.int64)
    r, g, b = channels[..., 0], channels[..., 1], channels[..., 2]
    top = channels.max(axis=-1)
    bottom = channels.min(axis=-1)

    red, green, blue = r / 255.0, g / 255.0, b / 255.0
    high = top / 255.0
    chroma = high - bottom / 255.0

    value = high * 100.0
    safe_high = np.where(top > 0, high, 1.0)
    saturation = np.where(top > 0, (chroma / safe_high) * 100.0, 0.0)

    achromatic = top == bottom
    safe_chroma = np.where(achromatic, 1.0, chroma)
    hue_prime = np.select(
        [achromatic, r == top, g == top],
        [
            0.0,
            (green - blue) / safe_chroma,
            2.0 + (blue - red) / safe_chroma,
        ],
        default=4.0 + (red - green) / safe_chroma,
    )
    hue = hue_prime * 60.0
    hue = np.where(hue < 0.0, hue + 360.0, hue)
    return np.stack((hue, saturation, value), axis=-1)


def hsv_to_rgb_array(hsv: np.ndarray) -> np.ndarray:
    """Convert ``(..., 3)`` HSV floats back to ``(..., 3)`` 8-bit RGB."""

    hsv = np.asarray(hsv, dtype=np.float64)
    hue = wrap_hue_array(hsv[..., 0])
    saturation = hsv[..., 1] / 100.0
    value = hsv[..., 2] / 100.0
    chroma = saturation * value
    low = value - chroma
    hue_prime = np.where(hue >= 300.0, (hue - 360.0) / 60.0, hue / 60.0)

    sectors = [hue_prime < 0.0, hue_prime < 1.0, hue_prime < 2.0, hue_prime < 3.0, hue_prime < 4.0]
    red = np.select(
        sectors,
        [value, value, low - (hue_prime - 2.0) * chroma, low, low],
        default=low + (hue_prime - 4.0) * chroma,
    )
    green = np.select(
        sectors,
        [low, low + hue_prime * chroma, value, value, low - (hue_prime - 4.0) * chroma],
        default=low,
    )
    blue = np.select(
        sectors,
        [low - hue_prime * chroma, low, low, low + (hue_prime - 2.0) * chroma, value],
        default=value,
    )
    rgb = np.stack((red, green, blue), axis=-1)
    return np.clip(np.floor(rgb * 255.0 + 0.5), 0, 255).astype(np.uint8)


def reflect_hue_array(hue: np.ndarray, axis: float) -> np.ndarray:
    """Mirror every hue about *axis*, returning hues in ``[0, 360)``."""

    angle = wrap_hue_array(np.asarray(hue, dtype=np.float64) - axis)
    angle = 360.0 - angle
    angle = angle + axis
    return wrap_hue_array(angle)


def reflect_rgba_array(source: np.ndarray, axis: float, out: np.ndarray | None = None) -> np.ndarray:
    """Reflect the hue of an RGBA block, copying alpha through untouched."""

    if out is None:
        out = np.empty_like(source)
    hsv = rgb_to_hsv_array(source[..., :3])
    hsv[..., 0] = reflect_hue_array(hsv[..., 0], axis)
    out[..., :3] = hsv_to_rgb_array(hsv)
    out[..., 3] = source[..., 3]
    return out
