from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

CONFIG_DIR_ENV = "CORNERFX_CONFIG_DIR"
CONFIG_FILE_NAME = "cornerfx.cfg"
DEFAULT_CONFIG = {
    "_comment": (
        "Valid units: px (default), mm, cm, in, pt, pc. Value is case-insensitive. "
        "method: auto, arc or bezier. mode: F, IF, C or IC."
    ),
    "units": "px",
    "method": "auto",
    "mode": "F",
    "chamfer_steps": 1,
}
_UNIT_INFO: Dict[str, Dict[str, Any]] = {
    "px": {"label": "px", "scale_to_px": 1.0},
    "millimeters": {"label": "mm", "scale_to_px": 96.0 / 25.4},
    "centimeters": {"label": "cm", "scale_to_px": 96.0 / 2.54},
    "inches": {"label": "in", "scale_to_px": 96.0},
    "points": {"label": "pt", "scale_to_px": 4.0 / 3.0},
    "picas": {"label": "pc", "scale_to_px": 16.0},
}
_UNIT_ALIASES = {
    "pixel": "px",
    "pixels": "px",
    "millimeter": "millimeters",
    "mm": "millimeters",
    "centimeter": "centimeters",
    "cm": "centimeters",
    "inch": "inches",
    "in": "inches",
    "point": "points",
    "pt": "points",
    "pica": "picas",
    "pc": "picas",
}
_METHODS = ("auto", "arc", "bezier")
_MODES = ("F", "IF", "C", "IC")


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from cornerfx.cfg."""

    name: str
    label: str
    scale_to_px: float


@dataclass(frozen=True)
class EffectDefaults:
    method: str
    mode: str
    chamfer_steps: int


def config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cornerfx"


def config_file() -> Path:
    return config_dir() / CONFIG_FILE_NAME


def ensure_user_config() -> None:
    """Ensure ~/.cornerfx/cornerfx.cfg exists with sane defaults."""

    directory = config_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        return

    path = directory / CONFIG_FILE_NAME
    if path.exists():
        return

    try:
        path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return


def _load_user_config() -> Dict[str, Any]:
    ensure_user_config()
    try:
        data = json.loads(config_file().read_text())
    except (OSError, json.JSONDecodeError):
        return DEFAULT_CONFIG.copy()
    if not isinstance(data, dict):
        return DEFAULT_CONFIG.copy()
    return data


def _normalize_units(value: str) -> str | None:
    key = value.strip().lower()
    if key in _UNIT_INFO:
        return key
    return _UNIT_ALIASES.get(key)


def get_unit_settings() -> UnitSettings:
    """Return the configured units and the conversion to px."""

    raw_config = _load_user_config()
    raw_units = str(raw_config.get("units", DEFAULT_CONFIG["units"]))
    normalized = _normalize_units(raw_units)
    if normalized is None:
        normalized = DEFAULT_CONFIG["units"]

    info = _UNIT_INFO[normalized]
    return UnitSettings(name=normalized, label=info["label"], scale_to_px=info["scale_to_px"])


def get_effect_defaults() -> EffectDefaults:
    """Return the configured method, mode and chamfer step defaults."""

    raw_config = _load_user_config()
    method = str(raw_config.get("method", DEFAULT_CONFIG["method"])).strip().lower()
    if method not in _METHODS:
        method = DEFAULT_CONFIG["method"]
    mode = str(raw_config.get("mode", DEFAULT_CONFIG["mode"])).strip().upper()
    if mode not in _MODES:
        mode = DEFAULT_CONFIG["mode"]
    try:
        steps = int(raw_config.get("chamfer_steps", DEFAULT_CONFIG["chamfer_steps"]))
    except (TypeError, ValueError):
        steps = DEFAULT_CONFIG["chamfer_steps"]
    if steps < 1:
        steps = DEFAULT_CONFIG["chamfer_steps"]
    return EffectDefaults(method=method, mode=mode, chamfer_steps=steps)
