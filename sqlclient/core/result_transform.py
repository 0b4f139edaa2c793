"""
Turn driver values into display strings.

Cells are first scanned into nullable strings (``None`` means SQL NULL), then
rendered with NULL replaced by the literal ``"NULL"``. A text cell that holds
``"NULL"`` renders the same as SQL NULL; the output is for display only.
"""

from __future__ import annotations

import datetime
import json
from collections.abc import Sequence
from typing import Any

NULL_MARKER = "NULL"


def to_nullable_string(value: Any) -> str | None:
    """
    Scan one driver value into a string, keeping SQL NULL as ``None``.

    bytes are decoded as UTF-8 (invalid sequences replaced), bools render as
    ``true``/``false``, JSON documents (dict/list) as compact JSON.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str, ensure_ascii=False)
    if isinstance(value, datetime.timedelta):
        return _format_interval(value)
    return str(value)


def _format_interval(value: datetime.timedelta) -> str:
    """Render a timedelta (MySQL TIME) as [-]HH:MM:SS[.ffffff], hours not wrapped into days."""
    sign = "-" if value < datetime.timedelta(0) else ""
    total_us = abs(value) // datetime.timedelta(microseconds=1)
    seconds, micros = divmod(total_us, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def scan_row(row: Sequence[Any], width: int) -> list[str | None]:
    """Scan every cell of a row; the row must have exactly ``width`` cells."""
    if len(row) != width:
        raise ValueError(f"expected {width} values in row, got {len(row)}")
    return [to_nullable_string(v) for v in row]


def map_row(columns: Sequence[str], cells: Sequence[str | None]) -> dict[str, str]:
    """Build column -> display string for one scanned row."""
    return {
        name: NULL_MARKER if cell is None else cell
        for name, cell in zip(columns, cells, strict=True)
    }
