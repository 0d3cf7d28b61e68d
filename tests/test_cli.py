from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cornerfx.cli import _scene_factory_from_module, app
from cornerfx.preview import PathPreviewer, PreviewBackendError

runner = CliRunner()
SQUARE = "M 0,0 L 10,0 L 10,10 L 0,10 Z"


def test_apply_prints_filleted_path():
    result = runner.invoke(app, ["apply", SQUARE, "--radius", "3"])
    assert result.exit_code == 0, result.output
    assert "M 3,0 L 7,0 A 3,3 45 0,1 10,3" in result.output
    assert result.output.strip().endswith("Z")


def test_apply_zero_radius_is_identity():
    result = runner.invoke(app, ["apply", SQUARE])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == SQUARE


def test_apply_chamfer_with_steps():
    result = runner.invoke(app, ["apply", "M 0,0 L 10,0 L 10,10", "--radius", "3", "--mode", "C", "--steps", "2"])
    assert result.exit_code == 0, result.output
    assert "A" not in result.output
    assert result.output.count("L") == 4


def test_apply_uses_configured_units(isolated_config: Path):
    isolated_config.mkdir(parents=True, exist_ok=True)
    (isolated_config / "cornerfx.cfg").write_text(json.dumps({"units": "in"}))
    result = runner.invoke(app, ["apply", "M 0,0 L 200,0 L 200,200", "--radius", "1", "--method", "bezier"])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("M 0,0 L 104,0 C")


def test_apply_with_stored_satellites():
    stored = "F,0,1,0,1,0,0 @ F,2,1,0,1,0,0 @ F,0,1,0,1,0,0 @ F,0,1,0,1,0,0"
    result = runner.invoke(app, ["apply", SQUARE, "--satellites", stored])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "M 0,0 L 8,0 A 2,2 45 0,1 10,2 L 10,10 L 0,10 Z"


def test_apply_writes_output_file(tmp_path: Path):
    output = tmp_path / "out" / "square.d"
    result = runner.invoke(app, ["apply", SQUARE, "--radius", "3", "--output", str(output)])
    assert result.exit_code == 0, result.output
    assert output.read_text().startswith("M 3,0")
    assert "Satellites:" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["apply", "L 0 0"],
        ["apply", SQUARE, "--mode", "round"],
        ["apply", SQUARE, "--method", "spline"],
    ],
)
def test_apply_rejects_bad_input(args):
    result = runner.invoke(app, args)
    assert result.exit_code != 0


def test_apply_rejects_time_amount_above_one():
    stored = "F,0,1,0,1,0,0 @ F,1.5,1,1,1,0,0 @ F,0,1,0,1,0,0 @ F,0,1,0,1,0,0"
    result = runner.invoke(app, ["apply", SQUARE, "--satellites", stored])
    assert result.exit_code != 0


def test_preview_missing_model(tmp_path: Path):
    result = runner.invoke(app, ["preview", str(tmp_path / "missing.py"), "--no-watch"])
    assert result.exit_code != 0


def test_scene_factory_requires_build(tmp_path: Path):
    model = tmp_path / "model.py"
    model.write_text("VALUE = 1\n")
    factory = _scene_factory_from_module(model)
    with pytest.raises(RuntimeError):
        factory()


@pytest.mark.preview
def test_docs_examples_collect(project_root: Path):
    previewer = PathPreviewer(console=None)
    examples = sorted((project_root / "docs" / "examples").rglob("*.py"))
    examples.append(project_root / "examples" / "rounded_tab.py")
    assert examples
    for model in examples:
        datasets = previewer.collect_datasets(_scene_factory_from_module(model)())
        assert datasets, model
        assert all(poly.n_points > 0 for poly in datasets)


@pytest.mark.preview
def test_preview_rejects_unknown_scene():
    previewer = PathPreviewer(console=None)
    with pytest.raises(PreviewBackendError):
        previewer.collect_datasets(["not a path"])
