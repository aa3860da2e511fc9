"""Tests for batch loading and the ordered batch runner."""

from __future__ import annotations

from pathlib import Path

import pytest

from sheetman.contracts.batch import BatchDefaults, BatchSpec
from sheetman.contracts.params import ItemParams
from sheetman.engine.batch import BatchValidationError, load_batch, run_batch, run_items


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "batch.yaml"
    path.write_text(text)
    return path


# ---------------------------------------------------------------------------
# load_batch
# ---------------------------------------------------------------------------
class TestLoadBatch:
    def test_yaml_with_camel_case_items(self, tmp_path: Path):
        spec = load_batch(_write(tmp_path, """\
name: nightly
defaults: { continue_on_fail: true }
items:
  - operation: create
    filePath: people.xlsx
    sheetName: People
    data: [{Name: Ana, Age: 30}]
  - { operation: view, filePath: people.xlsx, sheetName: People }
"""))
        assert spec.name == "nightly"
        assert spec.defaults.continue_on_fail is True
        assert [i.operation for i in spec.items] == ["create", "view"]
        assert spec.items[0].records() == [{"Name": "Ana", "Age": 30}]

    def test_top_level_list_is_accepted(self, tmp_path: Path):
        spec = load_batch(_write(tmp_path, "- {operation: readFile, filePath: a.xlsx}\n"))
        assert spec.items[0].file_path == "a.xlsx"

    def test_json_batch(self, tmp_path: Path):
        path = tmp_path / "batch.json"
        path.write_text('{"items": [{"operation": "deleteFile", "filePath": "a.xlsx"}]}')
        assert load_batch(path).items[0].operation == "deleteFile"

    @pytest.mark.parametrize("text, message", [
        ("just a string\n", "mapping"),
        ("items: []\n", "at least one item"),
        ("name: x\n", "'items'"),
        ("items: [{operation: view}]\nextra: 1\n", "Unknown batch keys: extra"),
    ])
    def test_rejects_bad_shapes(self, tmp_path: Path, text, message):
        with pytest.raises(BatchValidationError, match=message):
            load_batch(_write(tmp_path, text))

    def test_unknown_operation_reports_issues(self, tmp_path: Path):
        with pytest.raises(BatchValidationError) as exc:
            load_batch(_write(tmp_path, "items: [{operation: rename}]\n"))
        assert exc.value.details[0]["loc"].startswith("items.0")


# ---------------------------------------------------------------------------
# run_items / run_batch
# ---------------------------------------------------------------------------
GOOD = ItemParams(operation="create", file_path="a.xlsx", sheet_name="S", data='[{"x": 1}]')
SOFT = ItemParams(operation="readFile", file_path="missing.xlsx")
BAD = ItemParams(operation="view", file_path="missing.xlsx", sheet_name="S")


def test_items_run_in_order(memory_engine):
    view = ItemParams(operation="view", file_path="a.xlsx", sheet_name="S")
    results, skipped = run_items(memory_engine, [GOOD, view])
    assert skipped == 0
    assert results[1].rows == [{"x": 1}]


def test_failure_stops_the_run_by_default(memory_engine, memory_storage):
    results, skipped = run_items(memory_engine, [BAD, GOOD, GOOD])
    assert len(results) == 1
    assert skipped == 2
    assert memory_storage.files == {}


def test_continue_on_fail_runs_everything(memory_engine):
    results, skipped = run_items(memory_engine, [BAD, GOOD], continue_on_fail=True)
    assert [r.success for r in results] == [False, True]
    assert skipped == 0


def test_soft_outcome_does_not_stop_the_run(memory_engine):
    results, skipped = run_items(memory_engine, [SOFT, GOOD])
    assert results[0].soft
    assert results[1].success
    assert skipped == 0


def test_batch_summary_counts(memory_engine):
    spec = BatchSpec(name="mix", items=[GOOD, SOFT, BAD, GOOD])
    summary = run_batch(spec, memory_engine)
    assert summary.ok is False
    assert summary.items_total == 4
    assert summary.items_succeeded == 1
    assert summary.items_soft == 1
    assert summary.items_failed == 1
    assert summary.items_skipped == 1


def test_soft_only_batch_is_ok(memory_engine):
    summary = run_batch(BatchSpec(items=[SOFT, GOOD]), memory_engine)
    assert summary.ok is True


def test_explicit_flag_overrides_batch_defaults(memory_engine):
    spec = BatchSpec(defaults=BatchDefaults(continue_on_fail=True), items=[BAD, GOOD])
    assert run_batch(spec, memory_engine).items_skipped == 0
    assert run_batch(spec, memory_engine, continue_on_fail=False).items_skipped == 1


def test_dry_run_default_applies_to_every_item(memory_engine, memory_storage):
    spec = BatchSpec(defaults=BatchDefaults(dry_run=True), items=[GOOD])
    summary = run_batch(spec, memory_engine)
    assert summary.items[0].dry_run is True
    assert memory_storage.writes == 0
    # items of the loaded batch are left untouched
    assert spec.items[0].dry_run is False
