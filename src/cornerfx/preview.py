from __future__ import annotations

import queue
import threading
from pathlib import Path
from typing import Callable, Iterable, List

from rich.console import Console
from rich.panel import Panel
from watchfiles import Change, watch

from cornerfx._config import UnitSettings, get_unit_settings
from cornerfx.modeling.path import Path as ShapePath
from cornerfx.modeling.path import PathVector

SceneFactory = Callable[[], object]


class PreviewBackendError(RuntimeError):
    """Raised when a preview backend cannot run."""


def _collect_datasets_from_scene(scene: object, pv_module) -> List[object]:
    datasets: List[object] = []

    def visit(item: object) -> None:
        if item is None:
            return

        if isinstance(item, PathVector):
            poly = item.to_polydata()
            if poly.n_points:
                datasets.append(poly)
            return

        if isinstance(item, ShapePath):
            if item.segments:
                datasets.append(item.to_polyline())
            return

        if isinstance(item, pv_module.DataSet):
            datasets.append(item)
            return

        if isinstance(item, (list, tuple, set)):
            for value in item:
                visit(value)
            return

        raise PreviewBackendError(
            "Model build() must return cornerfx paths, path vectors, PyVista datasets, or a list of them."
        )

    visit(scene)
    if not datasets:
        raise PreviewBackendError("Scene did not produce any paths.")
    return datasets


class PathPreviewer:
    """Render path scenes using PyVista and provide optional hot reload support."""

    def __init__(self, console: Console | None, unit_settings: UnitSettings | None = None):
        self.console = console or Console()
        self._pv = None
        self._unit_settings = unit_settings or get_unit_settings()

    def show(
        self,
        scene_factory: SceneFactory,
        initial_scene: object,
        model_path: Path,
        watch_files: bool,
        target_fps: int = 30,
        screenshot_path: Path | None = None,
        show_nodes: bool = False,
    ) -> None:
        pv = self._ensure_backend()
        plotter = pv.Plotter(window_size=(1280, 800))
        datasets = self.collect_datasets(initial_scene) if initial_scene is not None else []
        self._apply_scene(plotter, datasets, show_nodes=show_nodes)

        if screenshot_path is not None:
            screenshot_path.parent.mkdir(parents=True, exist_ok=True)
            plotter.show(title="cornerfx preview", auto_close=True, screenshot=str(screenshot_path))
            plotter.close()
            return

        if not watch_files:
            plotter.show(title="cornerfx preview")
            plotter.close()
            return

        reload_queue: queue.Queue[float] = queue.Queue()
        stop_event = threading.Event()
        watcher_thread = threading.Thread(
            target=self._watch_model_file,
            args=(model_path, reload_queue, stop_event),
            name="cornerfx-watch",
            daemon=True,
        )
        watcher_thread.start()

        def process_queue() -> None:
            reload_requested = False
            while True:
                try:
                    reload_queue.get_nowait()
                    reload_requested = True
                except queue.Empty:
                    break
            if not reload_requested:
                return

            self.console.print(f"[yellow]Reloading {model_path}…[/yellow]")
            datasets = self.collect_datasets(scene_factory())
            self._apply_scene(plotter, datasets, show_nodes=show_nodes)
            plotter.render()
            self.console.print(f"[green]Reloaded {model_path}[/green]")

        def guarded_process_queue() -> None:
            try:
                process_queue()
            except Exception as exc:  # pragma: no cover - surfaced via console
                self.console.print(Panel.fit(str(exc), title="Reload failed", style="red"))

        interval_seconds = max(1.0 / max(target_fps, 1), 0.05)
        callback_cleanup = self._install_timer_callback(plotter, guarded_process_queue, interval_seconds)

        try:
            plotter.show(title="cornerfx preview", auto_close=False)
        finally:
            stop_event.set()
            callback_cleanup()
            plotter.close()

    # Internal helpers -----------------------------------------------------

    def _ensure_backend(self):
        if self._pv is None:
            try:
                import pyvista as pv
            except ImportError as exc:  # pragma: no cover - runtime dep
                raise PreviewBackendError(
                    "PyVista is required for previewing. Install cornerfx with `pip install -e .`."
                ) from exc
            pv.set_plot_theme("document")
            self._pv = pv
        return self._pv

    def collect_datasets(self, scene: object) -> List[object]:
        """Return the PyVista line datasets for every path in a scene object."""

        pv = self._ensure_backend()
        return _collect_datasets_from_scene(scene, pv)

    def _apply_scene(self, plotter, datasets: Iterable[object], show_nodes: bool) -> None:
        color_cycle = ["#1f6feb", "#d1495b", "#2a9d8f", "#e9c46a", "#8e7dbe", "#f4a261"]
        plotter.clear()
        for index, poly in enumerate(datasets):
            color = color_cycle[index % len(color_cycle)]
            plotter.add_mesh(poly, name=f"path-{index}", color=color, line_width=2.5)
            if show_nodes and poly.n_points:
                plotter.add_points(
                    poly.points,
                    name=f"path-{index}-nodes",
                    color=color,
                    point_size=6.0,
                    render_points_as_spheres=True,
                )
        label = self._unit_settings.label
        plotter.show_bounds(grid="front", color="#5a677d", xlabel=f"X ({label})", ylabel=f"Y ({label})")
        plotter.view_xy()

    def _install_timer_callback(
        self,
        plotter,
        callback: Callable[[], None],
        interval_seconds: float,
    ):
        """Install a repeating timer callback compatible with the current PyVista backend."""

        add_callback = getattr(plotter, "add_callback", None)
        if callable(add_callback):
            callback_id = add_callback(callback, interval=interval_seconds)

            def cleanup() -> None:
                remove_callback = getattr(plotter, "remove_callback", None)
                if callable(remove_callback):
                    remove_callback(callback_id)

            return cleanup

        interactor = getattr(plotter, "iren", None)
        if interactor is None:
            raise PreviewBackendError("PyVista interactor unavailable; cannot attach timer callbacks.")

        duration_ms = max(int(interval_seconds * 1000), 10)
        timer_id = interactor.create_timer(duration=duration_ms, repeating=True)
        observer_id = interactor.add_observer("TimerEvent", lambda *_: callback())

        def cleanup() -> None:
            interactor.remove_observer(observer_id)
            interactor.destroy_timer(timer_id)

        return cleanup

    def _watch_model_file(
        self,
        model_path: Path,
        reload_queue: "queue.Queue[float]",
        stop_event: threading.Event,
    ) -> None:
        resolved_model = model_path.resolve()
        watch_root = resolved_model.parent

        for changes in watch(str(watch_root), stop_event=stop_event, debounce=300):
            if stop_event.is_set():
                return

            for change, changed_path in changes:
                if Change.deleted == change and Path(changed_path) == resolved_model:
                    reload_queue.put_nowait(0.0)
                    break
                if Path(changed_path).resolve() == resolved_model:
                    reload_queue.put_nowait(0.0)
                    break
