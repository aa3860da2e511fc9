"""Normalize arbitrary records onto a header set."""

from __future__ import annotations

from typing import Any

from sheetman.tabular.cells import EMPTY, CellValue, to_cell
from sheetman.tabular.model import SheetModel

NULL_TOKEN = "null"


def fill_value_from(raw: str | None) -> CellValue:
    """Map the configured fill token to a cell value: ``"null"`` means empty."""
    if raw is None or raw == NULL_TOKEN:
        return EMPTY
    return raw


def normalize_record(
    record: dict[str, Any],
    headers: list[str],
    fill: CellValue = EMPTY,
) -> dict[str, CellValue]:
    # Key lookup is exact and case-sensitive, unlike column lookup in
    # sheetman.tabular.matcher.
    row: dict[str, CellValue] = {}
    for header in headers:
        if not header:
            continue
        row[header] = to_cell(record[header]) if header in record else fill
    return row


def normalize_records(
    records: list[dict[str, Any]],
    headers: list[str],
    fill: CellValue = EMPTY,
) -> list[dict[str, CellValue]]:
    """One full row per record, in header order. Records are never dropped."""
    return [normalize_record(record, headers, fill) for record in records]


def records_from_sheet(sheet: SheetModel, headers: list[str]) -> list[dict[str, CellValue]]:
    """Read the data rows of a sheet back into records keyed by header.

    Cell ``i`` is keyed by ``headers[i]``; cells past the end of the header
    list or under an empty placeholder are ignored, and rows that end up
    with no keys at all are skipped.
    """
    records: list[dict[str, CellValue]] = []
    for _, cells in sheet.data_rows():
        record: dict[str, CellValue] = {}
        for col_idx, value in enumerate(cells[: len(headers)]):
            header = headers[col_idx]
            if header:
                record[header] = value
        if record:
            records.append(record)
    return records
