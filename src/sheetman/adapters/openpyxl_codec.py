"""openpyxl-based codec: .xlsx bytes <-> WorkbookModel."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any

import openpyxl
from openpyxl import Workbook
from openpyxl.utils import get_column_letter, range_boundaries
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.table import Table, TableStyleInfo
from openpyxl.worksheet.worksheet import Worksheet

from sheetman.contracts.common import InvalidInputError, WorkbookCorruptError
from sheetman.tabular.cells import Formula
from sheetman.tabular.model import ColumnSpec, SheetModel, WorkbookModel

logger = logging.getLogger(__name__)


def _trim(cells: list[Any]) -> list[Any]:
    end = len(cells)
    while end and cells[end - 1] is None:
        end -= 1
    return cells[:end]


def _cell_value(cell: Any) -> Any:
    if cell.data_type != "f":
        return cell.value
    # array formulas carry their text on .text
    text = getattr(cell.value, "text", cell.value)
    return Formula(text) if isinstance(text, str) else cell.value


def _read_sheet(ws: Worksheet) -> SheetModel:
    rows = [_trim([_cell_value(c) for c in r]) for r in ws.iter_rows()]
    while rows and not rows[-1]:
        rows.pop()
    sheet = SheetModel(name=ws.title, rows=rows)

    # An Excel table anchored at A1 supplies explicit column metadata.
    for tbl in ws.tables.values():
        if not tbl.ref:
            continue
        min_col, min_row, _, _ = range_boundaries(tbl.ref)
        if (min_col, min_row) != (1, 1):
            continue
        sheet.table_name = tbl.displayName
        sheet.columns = [
            ColumnSpec(header=tc.name, key=tc.name)
            for tc in tbl.tableColumns
            if tc.name
        ]
        break
    return sheet


def _table_ref(sheet: SheetModel) -> str | None:
    """A1 ref for re-emitting the sheet's table, or None if the header row can't carry one."""
    header = sheet.header_row()
    if not header:
        return None
    names = [h.strip().casefold() for h in header if isinstance(h, str)]
    if len(names) != len(header) or not all(names) or len(set(names)) != len(names):
        return None
    last_row = max(len(sheet.rows), 2)
    return f"A1:{get_column_letter(len(header))}{last_row}"


class OpenpyxlCodec:
    """Decode and encode .xlsx workbooks with openpyxl."""

    def decode(self, data: bytes) -> WorkbookModel:
        try:
            wb = openpyxl.load_workbook(BytesIO(data))
        except Exception as e:
            raise WorkbookCorruptError(f"Cannot open workbook: {e}") from e
        try:
            props = wb.properties
            model = WorkbookModel(
                title=props.title,
                creator=props.creator,
                last_modified_by=props.lastModifiedBy,
                created=props.created,
                modified=props.modified,
            )
            for ws in wb.worksheets:
                model.sheets[ws.title] = _read_sheet(ws)
        finally:
            wb.close()
        return model

    def encode(self, model: WorkbookModel) -> bytes:
        wb = Workbook()
        if model.sheets:
            wb.remove(wb.active)
        for sheet in model.sheets.values():
            ws = wb.create_sheet(title=sheet.name)
            for r, cells in enumerate(sheet.rows, start=1):
                for c, value in enumerate(cells, start=1):
                    if value is None:
                        continue
                    try:
                        cell = ws.cell(row=r, column=c, value=value)
                    except IllegalCharacterError as e:
                        raise InvalidInputError(
                            f"Sheet '{sheet.name}' contains a value with characters "
                            f"not allowed in a workbook: {value!r}"
                        ) from e
                    # openpyxl turns any "=..." string into a formula
                    if cell.data_type == "f" and not isinstance(value, Formula):
                        cell.data_type = "s"
            if sheet.table_name:
                ref = _table_ref(sheet)
                if ref is None:
                    logger.debug("dropping table %s from sheet %s: header row not valid for a table",
                                 sheet.table_name, sheet.name)
                else:
                    tab = Table(displayName=sheet.table_name, ref=ref)
                    tab.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True)
                    ws.add_table(tab)

        props = wb.properties
        if model.title is not None:
            props.title = model.title
        if model.creator is not None:
            props.creator = model.creator
        if model.last_modified_by is not None:
            props.lastModifiedBy = model.last_modified_by
        if model.created is not None:
            props.created = model.created
        if model.modified is not None:
            props.modified = model.modified

        buf = BytesIO()
        wb.save(buf)
        wb.close()
        return buf.getvalue()
