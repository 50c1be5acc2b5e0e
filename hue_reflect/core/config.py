"""Configuration module for the hue reflection pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional


OUTPUT_FILENAME = "output.png"
OUTPUT_FORMAT = "PNG"

# Upper bound for the worker pool, expressed per available processor.
MAX_WORKERS_PER_CPU = 2

LOG_FILE: Optional[Path] = None


@dataclass
class ReflectConfig:
    """Runtime configuration for a single reflection run."""

    input_path: Optional[Path] = None
    reflect_angle: float = 0.0
    output_path: Path = Path(OUTPUT_FILENAME)
    output_format: str = OUTPUT_FORMAT
    workers: Optional[int] = None
    max_workers_per_cpu: int = MAX_WORKERS_PER_CPU
    log_file: Optional[Path] = LOG_FILE

    def as_dict(self) -> Dict[str, object]:
        """Return the configuration as a plain dictionary."""

        return {
            "PATH_INPUT": self.input_path,
            "REFLECT_ANGLE": self.reflect_angle,
            "PATH_OUTPUT": self.output_path,
            "OUTPUT_FORMAT": self.output_format,
            "WORKERS": self.workers,
            "MAX_WORKERS_PER_CPU": self.max_workers_per_cpu,
            "LOG_FILE": self.log_file,
        }


def build_config(overrides: Optional[Mapping[str, object]] = None) -> Dict[str, object]:
    """Create a configuration dictionary with optional overrides.

    Unknown keys are ignored so callers can pass a superset of settings.
    """

    config = ReflectConfig()
    if overrides:
        mutable: MutableMapping[str, object] = config.as_dict()
        for key, value in overrides.items():
            if key in mutable:
                mutable[key] = value
        return dict(mutable)
    return config.as_dict()
