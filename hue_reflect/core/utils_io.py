"""I/O helpers for the hue reflection pipeline."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from .config import OUTPUT_FORMAT
from .errors import DecodeError, EncodeError
from .utils_image import from_rgba_array, to_rgba_array


LOGGER = logging.getLogger("hue_reflect.io")


def ensure_dir(path: Path) -> Path:
    """Ensure that *path* exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def load_image(path: Path | str) -> np.ndarray:
    """Decode *path* into an RGBA pixel grid."""

    source = Path(path)
    if not source.is_file():
        raise DecodeError(f"Input image not found: {source}")
    try:
        with Image.open(source) as img:
            grid = to_rgba_array(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise DecodeError(f"Failed to open/read image: {source.name}") from exc
    LOGGER.debug("Decoded %s as %dx%d", source, grid.shape[1], grid.shape[0])
    return grid


class SafeFileManager:
    """Manage atomic file writes with automatic directory handling."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def resolve(self, path: Path | str) -> Path:
        """Resolve *path* relative to :attr:`base_dir`."""

        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        ensure_dir(candidate.parent)
        return candidate

    def atomic_save(self, image: Image.Image, path: Path | str, *, format: Optional[str] = None) -> Path:
        """Safely save *image* to *path* using a temporary file."""

        try:
            destination = self.resolve(path)
            temp_path = destination.with_name(f".{destination.name}.tmp")
            try:
                image.save(temp_path, format=format or OUTPUT_FORMAT)
                os.replace(temp_path, destination)
            finally:
                if temp_path.exists():
                    temp_path.unlink()
        except (OSError, KeyError, ValueError) as exc:
            raise EncodeError(f"Failed to write image: {path}") from exc
        return destination


def save_grid(
    grid: np.ndarray,
    path: Path | str,
    base_dir: Optional[Path] = None,
    *,
    format: Optional[str] = None,
) -> Path:
    """Encode an RGBA grid (PNG unless *format* says otherwise) and persist it atomically."""

    manager = SafeFileManager(base_dir or Path.cwd())
    destination = manager.atomic_save(from_rgba_array(grid), path, format=format)
    LOGGER.info("Saved %s", destination)
    return destination
