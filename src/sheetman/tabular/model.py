"""Logical workbook model exchanged with the codec."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterator

from pydantic import BaseModel, Field


class ColumnSpec(BaseModel):
    """Explicit column metadata: display header and record key."""

    header: str
    key: str | None = None


class SheetModel(BaseModel):
    """One worksheet: optional column metadata plus physical rows.

    ``rows[0]`` is the first physical row (the header row for every sheet
    this package writes). Row and column indexes used by the methods below
    are zero-based.
    """

    name: str
    columns: list[ColumnSpec] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    table_name: str | None = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def header_row(self) -> list[Any]:
        return self.rows[0] if self.rows else []

    def data_rows(self) -> Iterator[tuple[int, list[Any]]]:
        """Yield ``(row_index, cells)`` for every non-empty row after the header."""
        for idx in range(1, len(self.rows)):
            cells = self.rows[idx]
            if any(v is not None for v in cells):
                yield idx, cells

    def cell(self, row_idx: int, col_idx: int) -> Any:
        if row_idx >= len(self.rows):
            return None
        cells = self.rows[row_idx]
        return cells[col_idx] if col_idx < len(cells) else None

    def set_cell(self, row_idx: int, col_idx: int, value: Any) -> Any:
        """Set a cell, growing the row as needed. Returns the previous value."""
        while len(self.rows) <= row_idx:
            self.rows.append([])
        cells = self.rows[row_idx]
        if len(cells) <= col_idx:
            cells.extend([None] * (col_idx + 1 - len(cells)))
        old = cells[col_idx]
        cells[col_idx] = value
        return old

    def clear(self) -> int:
        """Remove every physical row. Returns how many were removed."""
        removed = len(self.rows)
        self.rows.clear()
        return removed

    def set_columns(self, headers: list[str]) -> None:
        """Replace column metadata and write the headers into the first row.

        Cells of the first row beyond ``len(headers)`` are left untouched.
        Empty headers are positional placeholders: they get no key and an
        empty header cell.
        """
        self.columns = [ColumnSpec(header=h, key=h or None) for h in headers]
        for col_idx, header in enumerate(headers):
            self.set_cell(0, col_idx, header or None)

    def add_records(self, records: list[dict[str, Any]]) -> int:
        """Append keyed rows, placing each value in the column with that key."""
        key_index = {c.key: i for i, c in enumerate(self.columns) if c.key is not None}
        if records and not self.rows:
            self.rows.append([])
        for record in records:
            cells: list[Any] = [None] * len(self.columns)
            for key, value in record.items():
                idx = key_index.get(key)
                if idx is not None:
                    cells[idx] = value
            self.rows.append(cells)
        return len(records)


class WorkbookModel(BaseModel):
    """Ordered sheets plus document properties."""

    sheets: dict[str, SheetModel] = Field(default_factory=dict)
    title: str | None = None
    creator: str | None = None
    last_modified_by: str | None = None
    created: datetime | None = None
    modified: datetime | None = None

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def get_sheet(self, name: str) -> SheetModel | None:
        return self.sheets.get(name)

    def add_sheet(self, name: str) -> SheetModel:
        """Add an empty sheet. A blank name gets the next free ``SheetN`` name."""
        if not name:
            n = len(self.sheets) + 1
            while f"Sheet{n}" in self.sheets:
                n += 1
            name = f"Sheet{n}"
        if name in self.sheets:
            raise ValueError(f"Sheet '{name}' already exists")
        sheet = SheetModel(name=name)
        self.sheets[name] = sheet
        return sheet
