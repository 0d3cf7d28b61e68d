from __future__ import annotations

import os
from pathlib import Path

import pytest

from cornerfx.modeling.path import PathVector

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure():
    os.environ.setdefault("PYVISTA_OFF_SCREEN", "true")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user config at a scratch directory for every test."""
    config_dir = tmp_path / "cornerfx-config"
    monkeypatch.setenv("CORNERFX_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def square() -> PathVector:
    return PathVector.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=True)


@pytest.fixture
def l_path() -> PathVector:
    return PathVector.from_points([(0, 0), (10, 0), (10, 10)], closed=False)
