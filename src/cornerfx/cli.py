from __future__ import annotations

import importlib.util
import pathlib
import sys
import traceback
from types import ModuleType
from typing import Callable

import typer
from rich.console import Console
from rich.panel import Panel

from cornerfx._config import UnitSettings, get_effect_defaults, get_unit_settings
from cornerfx.effects.fillet_chamfer import FilletChamferEffect
from cornerfx.effects.nodesatellite import satellite_type_from_code
from cornerfx.io.satellites import dumps, loads
from cornerfx.io.svg import format_path_data, parse_path_data
from cornerfx.preview import PathPreviewer, PreviewBackendError
from cornerfx.validation import ValidationError, validate_satellites

console = Console()
app = typer.Typer(help="Fillet and chamfer the corners of SVG paths.")


def _log_active_units(units: UnitSettings) -> None:
    if abs(units.scale_to_px - 1.0) < 1e-9:
        console.print(f"[magenta]Units: {units.name} ({units.label}).[/magenta]")
    else:
        console.print(
            f"[magenta]Units: {units.name} ({units.label}); 1 {units.label} = {units.scale_to_px:.4g} px.[/magenta]"
        )


def _load_module(path: pathlib.Path) -> ModuleType:
    module_name = "cornerfx_user_model"
    if module_name in sys.modules:
        del sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise typer.BadParameter(f"Unable to import model at {path}")

    module = importlib.util.module_from_spec(spec)
    # Register module so features relying on sys.modules (e.g., dataclasses) work.
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


class ModelBuildError(RuntimeError):
    """Raised when a model module cannot provide a usable scene."""


def _format_exception(exc: BaseException) -> str:
    return "".join(traceback.format_exception(exc))


def _scene_factory_from_module(model_path: pathlib.Path) -> Callable[[], object]:
    def factory() -> object:
        module = _load_module(model_path)
        builder = getattr(module, "build", None)
        if builder is None or not callable(builder):
            raise ModelBuildError(f"{model_path} must define a callable build() function.")
        return builder()

    return factory


@app.command()
def apply(
    path_data: str = typer.Argument(..., help="SVG path data, e.g. 'M 0,0 L 10,0 L 10,10 Z'."),
    radius: float = typer.Option(0.0, min=0.0, help="Fillet radius or knot distance in the configured units."),
    mode: str | None = typer.Option(None, help="Corner type: F, IF, C or IC (config default)."),
    method: str | None = typer.Option(None, help="Join form: auto, arc or bezier (config default)."),
    steps: int | None = typer.Option(None, min=1, help="Number of chords in a chamfer (config default)."),
    flexible: bool = typer.Option(False, "--flexible", help="Treat the radius as a percentage of each curve."),
    use_knot_distance: bool = typer.Option(
        True,
        "--radius-is-knot-distance/--radius-is-radius",
        help="Measure the radius along the curves, or as the radius of the round join.",
    ),
    satellites: str | None = typer.Option(
        None, "--satellites", help="Stored per-corner satellites; overrides --radius."
    ),
    output: pathlib.Path | None = typer.Option(
        None, "--output", "-o", help="Write the resulting path data to this file instead of stdout."
    ),
) -> None:
    """
    Apply fillets or chamfers to every corner of a path and print the new path data.
    """

    defaults = get_effect_defaults()
    units = get_unit_settings()
    try:
        pathvector = parse_path_data(path_data).to_linear_and_cubic()
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid path data: {exc}") from exc

    try:
        effect = FilletChamferEffect(
            radius=radius,
            unit_scale=units.scale_to_px,
            method=method or defaults.method,
            mode=satellite_type_from_code(mode or defaults.mode),
            chamfer_steps=steps or defaults.chamfer_steps,
            flexible=flexible,
            use_knot_distance=use_knot_distance,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if satellites is not None:
        effect.satellites = loads(satellites, pathvector)
        try:
            validate_satellites(pathvector, effect.satellites)
        except ValidationError as exc:
            raise typer.BadParameter(f"Invalid satellites: {exc}") from exc
    else:
        effect.on_apply(pathvector)
        if not use_knot_distance:
            effect.update_amount()

    result = effect.do_effect(pathvector)
    text = format_path_data(result)

    if output is None:
        typer.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n")
    _log_active_units(units)
    console.print(
        Panel(
            f"Wrote path data to [green]{output}[/green].\nSatellites: {dumps(effect.satellites)}",
            title="Corners applied",
            border_style="green",
        )
    )


@app.command()
def preview(
    model: pathlib.Path = typer.Argument(..., help="Path to a Python module whose build() returns paths."),
    watch: bool = typer.Option(True, help="Watch the model file for changes and hot-reload."),
    target_fps: int = typer.Option(30, min=1, max=240, help="Preview framerate budget."),
    screenshot: pathlib.Path | None = typer.Option(
        None, "--screenshot", help="Optional path to save a screenshot of the preview."
    ),
    show_nodes: bool = typer.Option(False, "--show-nodes/--hide-nodes", help="Draw the sampled path points."),
) -> None:
    """
    Load a model module, build its paths, and open an interactive preview window.
    """

    if not model.exists():
        raise typer.BadParameter(f"Model path {model} does not exist.")

    scene_factory = _scene_factory_from_module(model)
    try:
        initial_scene = scene_factory()
    except Exception as exc:
        if watch:
            panel = Panel.fit(_format_exception(exc), title="Initial build failed, watching for changes", style="red")
            console.print(panel)
            initial_scene = None
        else:
            raise typer.BadParameter(f"Model execution failed: {exc}") from exc

    console.rule("cornerfx preview")
    console.print(f"Using model [green]{model}[/green]")
    if watch:
        console.print("[cyan]Watching for changes. Save to hot reload, close the window to stop.[/cyan]")

    units = get_unit_settings()
    _log_active_units(units)
    previewer = PathPreviewer(console=console, unit_settings=units)
    try:
        previewer.show(
            scene_factory=scene_factory,
            initial_scene=initial_scene,
            model_path=model,
            watch_files=watch,
            target_fps=target_fps,
            screenshot_path=screenshot,
            show_nodes=show_nodes,
        )
    except PreviewBackendError as exc:
        raise typer.BadParameter(str(exc)) from exc
