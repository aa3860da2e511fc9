"""Tabular reconciliation: headers, normalization, row matching."""

from sheetman.tabular.cells import EMPTY, CellKind, CellValue, Formula, cell_kind, cell_text, coerce_cell, to_cell
from sheetman.tabular.headers import data_headers, extract_headers, resolve_headers, user_headers
from sheetman.tabular.matcher import Condition, Mutation, find_and_update, find_column, match_rows
from sheetman.tabular.model import ColumnSpec, SheetModel, WorkbookModel
from sheetman.tabular.normalize import fill_value_from, normalize_records, records_from_sheet

__all__ = [
    "EMPTY",
    "CellKind",
    "CellValue",
    "ColumnSpec",
    "Condition",
    "Formula",
    "Mutation",
    "SheetModel",
    "WorkbookModel",
    "cell_kind",
    "cell_text",
    "coerce_cell",
    "data_headers",
    "extract_headers",
    "fill_value_from",
    "find_and_update",
    "find_column",
    "match_rows",
    "normalize_records",
    "records_from_sheet",
    "resolve_headers",
    "to_cell",
    "user_headers",
]
