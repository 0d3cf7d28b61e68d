from __future__ import annotations

import json
from pathlib import Path

import pytest

from cornerfx._config import (
    DEFAULT_CONFIG,
    config_file,
    get_effect_defaults,
    get_unit_settings,
)


def _write_config(config_dir: Path, data) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "cornerfx.cfg").write_text(json.dumps(data))


def test_config_created_with_defaults(isolated_config: Path):
    settings = get_unit_settings()
    assert settings.name == "px"
    assert settings.scale_to_px == 1.0
    assert config_file() == isolated_config / "cornerfx.cfg"
    assert json.loads(config_file().read_text()) == DEFAULT_CONFIG


@pytest.mark.parametrize(
    ("units", "name", "label", "scale"),
    [
        ("mm", "millimeters", "mm", 96 / 25.4),
        ("Centimeters", "centimeters", "cm", 96 / 2.54),
        ("inch", "inches", "in", 96.0),
        ("pt", "points", "pt", 4 / 3),
        ("pc", "picas", "pc", 16.0),
    ],
)
def test_unit_aliases(isolated_config: Path, units, name, label, scale):
    _write_config(isolated_config, {"units": units})
    settings = get_unit_settings()
    assert settings.name == name
    assert settings.label == label
    assert settings.scale_to_px == pytest.approx(scale)


def test_unknown_units_fall_back(isolated_config: Path):
    _write_config(isolated_config, {"units": "furlongs"})
    assert get_unit_settings().name == "px"


def test_corrupt_config_falls_back(isolated_config: Path):
    isolated_config.mkdir(parents=True, exist_ok=True)
    (isolated_config / "cornerfx.cfg").write_text("{not json")
    assert get_unit_settings().name == "px"
    assert get_effect_defaults().method == "auto"


def test_effect_defaults(isolated_config: Path):
    _write_config(isolated_config, {"method": "Bezier", "mode": "ic", "chamfer_steps": 3})
    defaults = get_effect_defaults()
    assert defaults.method == "bezier"
    assert defaults.mode == "IC"
    assert defaults.chamfer_steps == 3


def test_invalid_effect_defaults_fall_back(isolated_config: Path):
    _write_config(isolated_config, {"method": "spline", "mode": "round", "chamfer_steps": 0})
    defaults = get_effect_defaults()
    assert (defaults.method, defaults.mode, defaults.chamfer_steps) == ("auto", "F", 1)
