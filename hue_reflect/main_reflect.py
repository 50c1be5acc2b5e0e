"""Command line interface for the hue reflection pipeline."""
from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .core import config
from .core.errors import AngleParseError, HueReflectError, UsageError
from .core.utils_color import normalize_axis

LOGGER = logging.getLogger("hue_reflect.main_reflect")

USAGE_MESSAGE = "Usage: input a file path and reflect angle as command line arguments"


def _configure_logging(log_path: Optional[Path]) -> None:
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    handlers: List[logging.Handler] = []
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)
    logging.basicConfig(level=logging.INFO, handlers=handlers)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hue-reflect",
        description="Mirror the hue of every pixel of an image about an angle",
    )
    parser.add_argument("positionals", nargs="*", metavar="INPUT ANGLE", help="Input image path and reflect angle in degrees")
    parser.add_argument("--workers", type=int, default=None, help="Number of worker threads (default: processor count)")
    parser.add_argument("--output", type=Path, default=Path(config.OUTPUT_FILENAME), help="Where to write the PNG result")
    parser.add_argument("--log-file", type=Path, default=config.LOG_FILE, help="Optional log file")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse *argv*, keeping negative angles such as ``-1e2`` as positionals.

    argparse only recognizes plain negative integers and decimals, so other
    real-number spellings come back as unknown options. Leftover tokens are
    counted as positionals, so stray options trip the usage check.
    """

    args, extras = build_parser().parse_known_args(argv)
    args.positionals.extend(extras)
    return args


def parse_angle(text: str) -> float:
    """Parse a reflection angle and fold it into ``[0, 180)``."""

    try:
        angle = float(text)
    except ValueError as exc:
        raise AngleParseError(f"Angle must be number, got {text!r}") from exc
    if not math.isfinite(angle):
        raise AngleParseError(f"Angle must be a finite number, got {text!r}")
    return normalize_axis(angle)


def build_runtime_config(args: argparse.Namespace) -> Dict[str, object]:
    if len(args.positionals) != 2:
        raise UsageError(USAGE_MESSAGE)
    input_path, angle_text = args.positionals
    overrides: Dict[str, object] = {
        "PATH_INPUT": Path(input_path),
        "REFLECT_ANGLE": parse_angle(angle_text),
        "PATH_OUTPUT": args.output,
        "WORKERS": args.workers,
        "LOG_FILE": args.log_file,
    }
    return config.build_config(overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = build_runtime_config(args)
    except UsageError as exc:
        print(exc)
        return 0
    except AngleParseError as exc:
        raise SystemExit(str(exc)) from exc

    log_file = cfg["LOG_FILE"]
    _configure_logging(Path(log_file) if log_file else None)  # type: ignore[arg-type]
    LOGGER.info("Reflecting %s about %.3f degrees", cfg["PATH_INPUT"], cfg["REFLECT_ANGLE"])

    from .modules.hue_reflector import HueReflectionPipeline

    try:
        HueReflectionPipeline(cfg).run()
    except HueReflectError as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(str(exc)) from exc
    return 0


if __name__ == "__main__":
    sys.exit(main())
