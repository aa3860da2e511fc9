"""Cell value model: classification, conversion and string form."""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Union

import orjson

CellValue = Union[str, int, float, bool, datetime, date, time, None]

EMPTY: CellValue = None


class Formula(str):
    """Formula text (``=...``) read from a formula cell.

    Only values of this type are written back as formulas. A plain ``str``
    that happens to start with ``=`` is stored as text.
    """


class CellKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    EMPTY = "empty"


def cell_kind(value: Any) -> CellKind:
    """Classify a cell value."""
    if value is None:
        return CellKind.EMPTY
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, (int, float)):
        return CellKind.NUMBER
    if isinstance(value, (datetime, date, time)):
        return CellKind.DATETIME
    return CellKind.STRING


def is_empty(value: Any) -> bool:
    return cell_kind(value) is CellKind.EMPTY


def to_cell(value: Any) -> CellValue:
    """Convert a JSON-decoded record value into a cell value.

    Nested objects and arrays have no cell representation and are stored as
    their JSON text.
    """
    if value is None or isinstance(value, (str, int, float, bool, datetime, date, time)):
        return value
    if isinstance(value, (dict, list, tuple)):
        return orjson.dumps(value).decode()
    return str(value)


def cell_text(value: Any) -> str:
    """String form of a cell value, as used for matching and header scans."""
    kind = cell_kind(value)
    if kind is CellKind.EMPTY:
        return ""
    if kind is CellKind.BOOLEAN:
        return "true" if value else "false"
    if kind is CellKind.NUMBER and isinstance(value, float) and value.is_integer():
        return str(int(value))
    if kind is CellKind.DATETIME:
        return value.isoformat()
    return str(value)


def coerce_cell(value: Any, cell_type: str | None = None) -> CellValue:
    """Explicitly coerce a (usually textual) value to a cell type.

    cell_type: ``text``, ``number``, ``bool`` or ``auto`` (numbers and
    booleans are recognized, anything else stays text). ``None`` leaves the
    value untouched.
    """
    if cell_type is None or value is None:
        return to_cell(value)
    if cell_type == "text":
        return cell_text(value)
    if cell_type == "number":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        text = str(value).strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    if cell_type == "bool":
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "1", "yes", "y"):
            return True
        if text in ("false", "0", "no", "n", ""):
            return False
        raise ValueError(f"Cannot interpret {value!r} as a boolean")
    if cell_type == "auto":
        if not isinstance(value, str):
            return to_cell(value)
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        try:
            return coerce_cell(value, "number")
        except ValueError:
            return value
    raise ValueError(f"Unknown cell type '{cell_type}'. Valid: auto, bool, number, text")
