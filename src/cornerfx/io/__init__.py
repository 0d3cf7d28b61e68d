"""Readers and writers for path data and persisted satellites."""

from __future__ import annotations

from .satellites import dumps, from_records, loads, to_records
from .svg import format_path_data, parse_path_data

__all__ = [
    "dumps",
    "format_path_data",
    "from_records",
    "loads",
    "parse_path_data",
    "to_records",
]
