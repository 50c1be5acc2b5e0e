"""Command line behaviour of the reflect entry point."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from hue_reflect import main_reflect
from hue_reflect.core.errors import AngleParseError
from hue_reflect.main_reflect import USAGE_MESSAGE, main, parse_angle


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_reflect, "_configure_logging", lambda log_path: None)


@pytest.mark.parametrize("argv", [[], ["only-one.png"], ["a.png", "10", "extra"]])
def test_wrong_argument_count_prints_usage(argv, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    assert main(argv) == 0
    assert USAGE_MESSAGE in capsys.readouterr().out


def test_non_numeric_angle_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "in.png"), "ninety"])
    assert excinfo.value.code not in (0, None)


@pytest.mark.parametrize(
    "text,expected",
    [("0", 0.0), ("90", 90.0), ("180", 0.0), ("270.5", 90.5), ("-30", 150.0), ("1e3", 100.0), ("-1e2", 80.0)],
)
def test_parse_angle_folds_into_half_circle(text: str, expected: float) -> None:
    assert parse_angle(text) == pytest.approx(expected)


def test_parse_angle_tiny_negative_stays_below_180() -> None:
    angle = parse_angle("-1e-300")
    assert 0.0 <= angle < 180.0


@pytest.mark.parametrize("angle", ["-1e2", "-1E-3", "-.5e1"])
def test_main_accepts_exponent_negative_angles(angle: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    Image.new("RGB", (3, 2), (255, 0, 0)).save(tmp_path / "in.png", "PNG")

    assert main(["in.png", angle]) == 0
    assert (tmp_path / "output.png").exists()


def test_unknown_option_falls_through_to_usage(capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
    assert main([str(tmp_path / "in.png"), "10", "--bogus"]) == 0
    assert USAGE_MESSAGE in capsys.readouterr().out


@pytest.mark.parametrize("text", ["abc", "", "nan", "inf"])
def test_parse_angle_rejects_non_numbers(text: str) -> None:
    with pytest.raises(AngleParseError):
        parse_angle(text)


def test_main_writes_default_output_in_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    Image.new("RGBA", (5, 4), (255, 0, 0, 200)).save(tmp_path / "in.png", "PNG")

    assert main(["in.png", "90", "--workers", "2"]) == 0

    with Image.open(tmp_path / "output.png") as img:
        pixels = np.array(img.convert("RGBA"))
    assert pixels.shape == (4, 5, 4)
    assert (pixels == np.array([0, 255, 255, 200], dtype=np.uint8)).all()


def test_main_honours_output_flag(tmp_path: Path) -> None:
    source = tmp_path / "in.png"
    Image.new("RGB", (2, 2), (0, 0, 255)).save(source, "PNG")
    target = tmp_path / "custom" / "mirrored.png"

    assert main([str(source), "-60", "--output", str(target)]) == 0
    assert target.exists()


def test_main_missing_input_is_fatal(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.png"), "45"])
    assert excinfo.value.code not in (0, None)
    assert not (tmp_path / "output.png").exists()
