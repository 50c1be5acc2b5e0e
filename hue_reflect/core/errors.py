"""Error types raised by the hue reflection pipeline."""
from __future__ import annotations


class HueReflectError(Exception):
    """Base class for every error raised by the pipeline."""


class UsageError(HueReflectError):
    """Raised when the command line receives the wrong number of arguments."""


class AngleParseError(HueReflectError, ValueError):
    """Raised when the reflection angle is not a real number."""


class DecodeError(HueReflectError, OSError):
    """Raised when the input image cannot be opened or decoded."""


class EncodeError(HueReflectError, OSError):
    """Raised when the output image cannot be written."""


class WorkerFailure(HueReflectError, RuntimeError):
    """Raised after all workers joined when at least one row band failed."""

    def __init__(self, rows: range, cause: BaseException) -> None:
        super().__init__(f"Transform failed for rows {rows.start}..{rows.stop - 1}: {cause}")
        self.rows = rows
        self.cause = cause
