"""Tests for the cell value model."""

from datetime import date, datetime

import pytest

from sheetman.tabular.cells import CellKind, cell_kind, cell_text, coerce_cell, to_cell


@pytest.mark.parametrize("value,kind", [
    (None, CellKind.EMPTY),
    ("x", CellKind.STRING),
    ("", CellKind.STRING),
    (3, CellKind.NUMBER),
    (2.5, CellKind.NUMBER),
    (True, CellKind.BOOLEAN),
    (datetime(2024, 1, 2, 3, 4), CellKind.DATETIME),
    (date(2024, 1, 2), CellKind.DATETIME),
])
def test_cell_kind(value, kind):
    assert cell_kind(value) is kind


def test_cell_text_forms():
    assert cell_text(None) == ""
    assert cell_text(True) == "true"
    assert cell_text(False) == "false"
    assert cell_text(30) == "30"
    assert cell_text(30.0) == "30"
    assert cell_text(30.5) == "30.5"
    assert cell_text(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    assert cell_text("  padded ") == "  padded "


def test_to_cell_passes_scalars_through():
    assert to_cell(None) is None
    assert to_cell(1) == 1
    assert to_cell("a") == "a"
    assert to_cell(False) is False


def test_to_cell_serializes_nested_values():
    assert to_cell({"a": 1}) == '{"a":1}'
    assert to_cell([1, "b"]) == '[1,"b"]'


def test_coerce_cell_number():
    assert coerce_cell("42", "number") == 42
    assert coerce_cell(" 4.5 ", "number") == 4.5
    with pytest.raises(ValueError):
        coerce_cell("abc", "number")


def test_coerce_cell_bool():
    assert coerce_cell("yes", "bool") is True
    assert coerce_cell("0", "bool") is False
    with pytest.raises(ValueError):
        coerce_cell("maybe", "bool")


def test_coerce_cell_auto_and_text():
    assert coerce_cell("99", "auto") == 99
    assert coerce_cell("true", "auto") is True
    assert coerce_cell("Ana", "auto") == "Ana"
    assert coerce_cell("99", "text") == "99"
    assert coerce_cell(None, "number") is None


def test_coerce_cell_unknown_type():
    with pytest.raises(ValueError, match="Unknown cell type"):
        coerce_cell("1", "decimal")
