from __future__ import annotations

from typing import Iterator, List, Sequence

import numpy as np

from cornerfx.modeling.curves import are_near
from cornerfx.modeling.path import PathVector

from .nodesatellite import NodeSatellite, NodeSatelliteType, arc_length_at, time_at_arc_length

NodeSatellites = List[List[NodeSatellite]]


class PathVectorNodeSatellites:
    """One ``NodeSatellite`` per node of every subpath of a path vector.

    Satellite ``[i][j]`` sits on the node where curve ``j`` of subpath ``i``
    starts. Open subpaths carry one more satellite for their final endpoint;
    both endpoints of an open subpath always have a zero amount.
    """

    def __init__(self, pathvector: PathVector | None = None, satellites: NodeSatellites | None = None) -> None:
        self._pathvector = pathvector if pathvector is not None else PathVector()
        self._satellites: NodeSatellites = satellites if satellites is not None else []

    @property
    def pathvector(self) -> PathVector:
        return self._pathvector

    @property
    def node_satellites(self) -> NodeSatellites:
        return self._satellites

    def set_pathvector(self, pathvector: PathVector) -> None:
        self._pathvector = pathvector

    def set_node_satellites(self, satellites: NodeSatellites) -> None:
        self._satellites = satellites

    def get_total_node_satellites(self) -> int:
        return sum(len(row) for row in self._satellites)

    def __iter__(self) -> Iterator[NodeSatellite]:
        for row in self._satellites:
            yield from row

    def recalculate_for_new_pathvector(self, pathvector: PathVector, default_satellite: NodeSatellite) -> None:
        """Resize to the nodes of ``pathvector``.

        Satellites are matched to nodes by position: existing indices keep
        their satellite, new nodes receive a copy of ``default_satellite`` and
        satellites past the new node count are dropped.
        """
        rows: NodeSatellites = []
        for index, path in enumerate(pathvector):
            previous = self._satellites[index] if index < len(self._satellites) else []
            count = path.count_nodes()
            row = previous[:count]
            row.extend(default_satellite.copy() for _ in range(count - len(row)))
            rows.append(row)
        self._pathvector = pathvector
        self._satellites = rows
        self.zero_open_endpoints()

    def zero_open_endpoints(self) -> None:
        for path, row in zip(self._pathvector, self._satellites):
            if path.closed or not row:
                continue
            row[0].set_amount(0.0)
            row[-1].set_amount(0.0)

    def _eligible(self, sat: NodeSatellite, apply_if_zero: bool, apply_if_positive: bool, only_selected: bool) -> bool:
        if sat.amount == 0 and not apply_if_zero:
            return False
        if sat.amount > 0 and not apply_if_positive:
            return False
        return sat.selected or not only_selected

    def update_amount(
        self,
        amount: float,
        apply_if_zero: bool,
        apply_if_positive: bool,
        only_selected: bool,
        use_distance: bool,
        is_time: bool,
    ) -> None:
        """Write ``amount`` into every eligible satellite.

        When neither ``use_distance`` nor ``is_time`` is set, ``amount`` is a
        fillet radius and each satellite receives the knot distance that
        produces it on its own corner.
        """
        amount = max(float(amount), 0.0)
        if is_time:
            amount = min(amount, 1.0)
        for index, row in enumerate(self._satellites):
            path = self._pathvector[index] if index < len(self._pathvector) else None
            curves = path.curves() if path is not None else []
            closed = path is not None and path.closed
            for j, sat in enumerate(row):
                if not closed and (j == 0 or j == len(row) - 1):
                    continue
                if not self._eligible(sat, apply_if_zero, apply_if_positive, only_selected):
                    continue
                sat.set_is_time(is_time)
                if use_distance or is_time:
                    sat.set_amount(amount)
                elif j < len(curves):
                    sat.set_amount(sat.rad_to_len(amount, curves[j - 1], curves[j]))
                else:
                    sat.set_amount(0.0)
        self.zero_open_endpoints()

    def update_steps(self, steps: int, apply_if_zero: bool, apply_if_positive: bool, only_selected: bool) -> None:
        for sat in self:
            if self._eligible(sat, apply_if_zero, apply_if_positive, only_selected):
                sat.set_steps(steps)
        self.zero_open_endpoints()

    def update_node_satellite_type(
        self,
        kind: NodeSatelliteType,
        apply_if_zero: bool,
        apply_if_positive: bool,
        only_selected: bool,
    ) -> None:
        for sat in self:
            if self._eligible(sat, apply_if_zero, apply_if_positive, only_selected):
                sat.set_type(kind)
        self.zero_open_endpoints()

    def convert_is_time(self, is_time: bool) -> None:
        """Switch every satellite to ``is_time``, re-deriving amounts on the curve they start."""
        for path, row in zip(self._pathvector, self._satellites):
            curves = path.curves()
            for j, sat in enumerate(row):
                if sat.is_time == is_time:
                    continue
                if j < len(curves):
                    if is_time:
                        sat.set_amount(time_at_arc_length(sat.amount, curves[j]))
                    else:
                        sat.set_amount(arc_length_at(sat.amount, curves[j]))
                sat.set_is_time(is_time)

    def set_hidden(self, hidden: bool) -> None:
        for sat in self:
            sat.set_hidden(hidden)

    def select_nodes(self, points: Sequence[Sequence[float]], tolerance: float = 1e-6) -> None:
        """Mark the satellites whose node coincides with one of ``points`` as selected."""
        targets = [np.asarray(p, dtype=float).reshape(2) for p in points]
        for path, row in zip(self._pathvector, self._satellites):
            for sat, node in zip(row, path.node_points()):
                sat.set_selected(any(are_near(node, target, tolerance) for target in targets))


__all__ = ["NodeSatellites", "PathVectorNodeSatellites"]
