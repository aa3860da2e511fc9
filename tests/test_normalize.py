"""Tests for record normalization and reading records back from a sheet."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from sheetman.tabular.headers import resolve_headers
from sheetman.tabular.model import SheetModel
from sheetman.tabular.normalize import (
    fill_value_from,
    normalize_record,
    normalize_records,
    records_from_sheet,
)


def test_fill_value_null_token_is_empty():
    assert fill_value_from("null") is None
    assert fill_value_from(None) is None


def test_fill_value_literal_is_verbatim():
    assert fill_value_from("N/A") == "N/A"
    assert fill_value_from("") == ""
    assert fill_value_from("NULL") == "NULL"


def test_scenario_disjoint_records_with_null_fill():
    data = [{"a": 1}, {"b": 2}]
    headers = resolve_headers([], [], data)
    rows = normalize_records(data, headers, fill_value_from("null"))
    assert rows == [{"a": 1, "b": None}, {"a": None, "b": 2}]


def test_literal_fill_for_missing_fields():
    rows = normalize_records([{"a": 1}], ["a", "b"], fill_value_from("-"))
    assert rows == [{"a": 1, "b": "-"}]


def test_key_lookup_is_case_sensitive():
    row = normalize_record({"name": "Ana"}, ["Name"], None)
    assert row == {"Name": None}


def test_all_absent_record_is_kept():
    rows = normalize_records([{}, {"x": 1}], ["a"], "?")
    assert rows == [{"a": "?"}, {"a": "?"}]


def test_explicit_none_value_is_not_replaced_by_fill():
    assert normalize_record({"a": None}, ["a"], "fill") == {"a": None}


def test_rows_follow_header_order():
    row = normalize_record({"b": 2, "a": 1}, ["a", "b"], None)
    assert list(row) == ["a", "b"]


def test_nested_values_become_json_text():
    assert normalize_record({"tags": ["x", "y"]}, ["tags"], None) == {"tags": '["x","y"]'}


def test_placeholder_headers_are_skipped():
    assert normalize_record({"a": 1}, ["a", "", "b"], None) == {"a": 1, "b": None}


# ---------------------------------------------------------------------------
# records_from_sheet
# ---------------------------------------------------------------------------
def test_records_from_sheet_skips_header_and_empty_rows():
    sheet = SheetModel(name="S", rows=[["Name", "Age"], ["Ana", 30], [None, None], ["Bob"]])
    assert records_from_sheet(sheet, ["Name", "Age"]) == [
        {"Name": "Ana", "Age": 30},
        {"Name": "Bob"},
    ]


def test_records_from_sheet_ignores_cells_beyond_headers():
    sheet = SheetModel(name="S", rows=[["Name"], [None, "orphan"], ["Ana", "extra"]])
    assert records_from_sheet(sheet, ["Name"]) == [{"Name": None}, {"Name": "Ana"}]


def test_records_from_sheet_skips_placeholder_columns():
    sheet = SheetModel(name="S", rows=[["Name", None, "City"], ["Ana", "x", "Lima"]])
    assert records_from_sheet(sheet, ["Name", "", "City"]) == [{"Name": "Ana", "City": "Lima"}]


# ---------------------------------------------------------------------------
# properties
# ---------------------------------------------------------------------------
keys = st.sampled_from(["a", "b", "c", "D", "d"])
record_lists = st.lists(st.dictionaries(keys, st.integers(), max_size=4), max_size=6)
fills = st.one_of(st.just("null"), st.text(max_size=4))


@given(data=record_lists, raw_fill=fills)
def test_every_row_is_rectangular_and_filled(data, raw_fill):
    headers = resolve_headers([], [], data)
    fill = fill_value_from(raw_fill)
    rows = normalize_records(data, headers, fill)

    assert len(rows) == len(data)
    for record, row in zip(data, rows):
        assert list(row) == headers
        for header in headers:
            if header in record:
                assert row[header] == record[header]
            elif raw_fill == "null":
                assert row[header] is None
            else:
                assert row[header] == raw_fill
