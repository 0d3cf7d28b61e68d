"""Persist node satellites as plain records or as a compact text form.

The text form writes one corner as ``type,amount,steps,is_time,has_mirror,hidden,selected``
(booleans as ``0``/``1``), joins corners with ``" @ "`` and subpaths with ``" | "``.
"""

from __future__ import annotations

import math
import warnings
from typing import Any, List, Sequence, Tuple

from cornerfx.effects.nodesatellite import (
    NodeSatellite,
    satellite_type_code,
    satellite_type_from_code,
)
from cornerfx.effects.satellites import NodeSatellites, PathVectorNodeSatellites
from cornerfx.modeling.path import PathVector

SatelliteRecord = Tuple[str, float, int, bool, bool, bool, bool]

DEFAULT_RECORD: SatelliteRecord = ("F", 0.0, 1, False, True, False, False)

CORNER_SEPARATOR = " @ "
SUBPATH_SEPARATOR = " | "

_TRUE = {"1", "true", "yes"}
_FALSE = {"0", "false", "no"}


def _record(sat: NodeSatellite) -> SatelliteRecord:
    return (
        satellite_type_code(sat.type),
        float(sat.amount),
        int(sat.steps),
        sat.is_time,
        sat.has_mirror,
        sat.hidden,
        sat.selected,
    )


def to_records(satellites: PathVectorNodeSatellites) -> List[SatelliteRecord]:
    """Flat list of records, one per corner, subpath by subpath."""
    return [_record(sat) for row in satellites.node_satellites for sat in row]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    key = str(value).strip().lower()
    if key in _TRUE:
        return True
    if key in _FALSE:
        return False
    raise ValueError(f"Invalid boolean {value!r}.")


def _parse_steps(value: Any) -> int:
    steps = float(value)
    if not math.isfinite(steps) or steps != int(steps):
        raise ValueError(f"Invalid step count {value!r}.")
    return int(steps)


def _satellite_from_record(record: Sequence[Any]) -> NodeSatellite:
    if isinstance(record, str) or len(record) != len(DEFAULT_RECORD):
        raise ValueError(f"Expected {len(DEFAULT_RECORD)} fields, got {record!r}.")
    kind, amount, steps, is_time, has_mirror, hidden, selected = record
    amount = float(amount)
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"Invalid amount {amount!r}.")
    return NodeSatellite(
        type=satellite_type_from_code(str(kind)),
        amount=amount,
        steps=_parse_steps(steps),
        is_time=_parse_bool(is_time),
        has_mirror=_parse_bool(has_mirror),
        hidden=_parse_bool(hidden),
        selected=_parse_bool(selected),
    )


def _default_satellite() -> NodeSatellite:
    return _satellite_from_record(DEFAULT_RECORD)


def _row_from_records(stored: Sequence[Any], node_count: int, index: int) -> List[NodeSatellite]:
    row: List[NodeSatellite] = []
    for position in range(node_count):
        if position >= len(stored):
            row.append(_default_satellite())
            continue
        try:
            row.append(_satellite_from_record(stored[position]))
        except (TypeError, ValueError) as exc:
            warnings.warn(
                f"Subpath {index} corner {position}: {exc} Using the default satellite.",
                RuntimeWarning,
                stacklevel=3,
            )
            row.append(_default_satellite())
    return row


def _build(rows: NodeSatellites, pathvector: PathVector) -> PathVectorNodeSatellites:
    satellites = PathVectorNodeSatellites(pathvector, rows)
    satellites.zero_open_endpoints()
    return satellites


def from_records(records: Sequence[Sequence[Any]], pathvector: PathVector) -> PathVectorNodeSatellites:
    """Rebuild the satellites of ``pathvector`` from a flat list of ``records``.

    Records are consumed in order, ``path.count_nodes()`` per subpath.
    Malformed corners are replaced by the default satellite with a
    ``RuntimeWarning``. Missing corners are defaulted and surplus ones ignored.
    """
    records = list(records)
    rows: NodeSatellites = []
    offset = 0
    for index, path in enumerate(pathvector):
        count = path.count_nodes()
        rows.append(_row_from_records(records[offset : offset + count], count, index))
        offset += count
    return _build(rows, pathvector)


def _format_amount(value: float) -> str:
    return f"{value:.12g}"


def dumps(satellites: PathVectorNodeSatellites) -> str:
    subpaths = []
    for row in satellites.node_satellites:
        corners = []
        for kind, amount, steps, is_time, has_mirror, hidden, selected in map(_record, row):
            fields = [kind, _format_amount(amount), str(steps)]
            fields.extend("1" if flag else "0" for flag in (is_time, has_mirror, hidden, selected))
            corners.append(",".join(fields))
        subpaths.append(CORNER_SEPARATOR.join(corners))
    return SUBPATH_SEPARATOR.join(subpaths)


def loads(text: str, pathvector: PathVector) -> PathVectorNodeSatellites:
    """Parse the text form; each ``|`` group is matched to its own subpath."""
    stored: List[List[List[str]]] = []
    if text.strip():
        for subpath in text.split("|"):
            corners = [corner.strip() for corner in subpath.split("@")]
            stored.append([[field.strip() for field in corner.split(",")] for corner in corners if corner])
    rows: NodeSatellites = []
    for index, path in enumerate(pathvector):
        row = stored[index] if index < len(stored) else []
        rows.append(_row_from_records(row, path.count_nodes(), index))
    return _build(rows, pathvector)


__all__ = [
    "CORNER_SEPARATOR",
    "DEFAULT_RECORD",
    "SUBPATH_SEPARATOR",
    "SatelliteRecord",
    "dumps",
    "from_records",
    "loads",
    "to_records",
]
