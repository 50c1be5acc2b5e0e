"""Hue reflection pipeline that coordinates decoding, row workers and saving."""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, Optional

import numpy as np
from PIL import Image

from ..core import config
from ..core.utils_color import normalize_axis
from ..core.utils_image import from_rgba_array, reflect_rgba_array, to_rgba_array
from ..core.utils_io import load_image, save_grid
from ..core.utils_parallel import partition_rows, resolve_worker_count, run_row_bands

LOGGER = logging.getLogger("hue_reflect.reflector")


def transform_rows(source: np.ndarray, target: np.ndarray, axis: float) -> None:
    """Reflect every row of *source* into the same row of *target*."""

    for row in range(source.shape[0]):
        reflect_rgba_array(source[row], axis, out=target[row])


def reflect_pixels(
    grid: Image.Image | np.ndarray,
    angle: float,
    *,
    workers: Optional[int] = None,
    max_workers_per_cpu: int = config.MAX_WORKERS_PER_CPU,
) -> np.ndarray:
    """Return a copy of *grid* with every hue mirrored about *angle* degrees.

    *grid* is a ``(height, width, 4)`` ``uint8`` array (or a Pillow image); the
    result has the same shape and the same alpha channel. *workers* defaults to
    the processor count; ``0`` or ``1`` runs everything on the calling thread.
    The output does not depend on the worker count.
    """

    source = to_rgba_array(grid)
    axis = normalize_axis(angle)
    height, width = source.shape[:2]
    target = np.empty_like(source)

    worker_count = resolve_worker_count(workers, per_cpu=max_workers_per_cpu)
    partition = partition_rows(height, worker_count if worker_count > 1 else 0)
    LOGGER.debug(
        "Reflecting %dx%d grid about %.3f degrees with %d bands and %d remainder rows",
        width,
        height,
        axis,
        partition.worker_count,
        len(partition.remainder),
    )

    def _band(rows_in: np.ndarray, rows_out: np.ndarray) -> None:
        transform_rows(rows_in, rows_out, axis)

    run_row_bands(_band, source, target, partition)
    return target


def reflect_image(image: Image.Image, angle: float, *, workers: Optional[int] = None) -> Image.Image:
    """Pillow convenience wrapper around :func:`reflect_pixels`."""

    return from_rgba_array(reflect_pixels(image, angle, workers=workers))


class HueReflectionPipeline:
    """Load an image, reflect its hues and write the result."""

    def __init__(self, cfg: Dict[str, object]) -> None:
        input_path = cfg.get("PATH_INPUT")
        if input_path is None:
            raise ValueError("PATH_INPUT is required")
        self.input_path = Path(input_path)  # type: ignore[arg-type]
        self.output_path = Path(cfg.get("PATH_OUTPUT") or config.OUTPUT_FILENAME)  # type: ignore[arg-type]
        self.reflect_angle = normalize_axis(float(cfg.get("REFLECT_ANGLE", 0.0)))  # type: ignore[arg-type]
        workers = cfg.get("WORKERS")
        self.workers: Optional[int] = None if workers is None else int(workers)  # type: ignore[arg-type]
        self.max_workers_per_cpu = int(cfg.get("MAX_WORKERS_PER_CPU", config.MAX_WORKERS_PER_CPU))  # type: ignore[arg-type]
        self.output_format = str(cfg.get("OUTPUT_FORMAT") or config.OUTPUT_FORMAT)
        self.logger = LOGGER
        self.logger.debug("Pipeline configured with %s", cfg)

    def run(self) -> Path:
        """Process the input image; nothing is written unless every row succeeded."""

        start_time = time.perf_counter()
        source = load_image(self.input_path)
        self.logger.info("Image loaded in %dms", (time.perf_counter() - start_time) * 1000)

        self.logger.info("Processing...")
        result = reflect_pixels(
            source,
            self.reflect_angle,
            workers=self.workers,
            max_workers_per_cpu=self.max_workers_per_cpu,
        )
        self.logger.info("Done in %dms", (time.perf_counter() - start_time) * 1000)

        return save_grid(result, self.output_path, format=self.output_format)
