"""Locate rows by column/value condition and update them."""

from __future__ import annotations

from typing import Any, NamedTuple

from sheetman.contracts.common import ColumnNotFoundError
from sheetman.tabular.cells import cell_text, is_empty
from sheetman.tabular.model import SheetModel


class Condition(NamedTuple):
    column: str
    value: Any


class Mutation(NamedTuple):
    target_column: str
    new_value: Any


def find_column(headers: list[str], name: str) -> int | None:
    """Zero-based index of ``name`` in ``headers`` (trimmed, case-insensitive)."""
    wanted = name.strip().casefold()
    if not wanted:
        return None
    for idx, header in enumerate(headers):
        if header.strip().casefold() == wanted:
            return idx
    return None


def _require_column(headers: list[str], name: str, role: str) -> int:
    idx = find_column(headers, name)
    if idx is None:
        available = [h for h in headers if h]
        raise ColumnNotFoundError(
            f"The {role} column \"{name}\" was not found. "
            f"Available headers: {', '.join(available)}",
            column=name,
            available=available,
        )
    return idx


def match_rows(sheet: SheetModel, headers: list[str], condition: Condition) -> list[int]:
    """Physical indexes of data rows whose condition cell equals the value.

    Both sides are compared by trimmed string form, case-sensitively.
    Empty cells never match.
    """
    col_idx = _require_column(headers, condition.column, "condition")
    wanted = cell_text(condition.value).strip()
    matches: list[int] = []
    for row_idx, cells in sheet.data_rows():
        value = cells[col_idx] if col_idx < len(cells) else None
        if is_empty(value):
            continue
        if cell_text(value).strip() == wanted:
            matches.append(row_idx)
    return matches


def find_and_update(
    sheet: SheetModel,
    headers: list[str],
    condition: Condition,
    mutation: Mutation,
) -> int:
    """Set the target cell of every matching row. Returns the update count."""
    target = mutation.target_column or condition.column
    _require_column(headers, condition.column, "condition")
    target_idx = _require_column(headers, target, "target")
    matches = match_rows(sheet, headers, condition)
    for row_idx in matches:
        sheet.set_cell(row_idx, target_idx, mutation.new_value)
    return len(matches)
