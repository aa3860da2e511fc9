"""Tests for timing and NDJSON lifecycle events."""

from __future__ import annotations

import io
import json

from sheetman.contracts.batch import BatchSpec
from sheetman.contracts.params import ItemParams
from sheetman.engine.batch import run_batch
from sheetman.observe.events import EventEmitter, Timer


def _events(capsys) -> list[dict]:
    return [json.loads(line) for line in capsys.readouterr().err.splitlines()]


def test_timer_measures_milliseconds():
    with Timer() as t:
        pass
    assert t.elapsed_ms >= 0


def test_disabled_emitter_is_silent(capsys):
    EventEmitter().emit("item.start", {"x": 1})
    assert capsys.readouterr().err == ""


def test_emitter_writes_one_json_line(capsys):
    EventEmitter(enabled=True).emit("item.start", {"file": "a.xlsx"})
    [event] = _events(capsys)
    assert event["event"] == "item.start"
    assert event["data"] == {"file": "a.xlsx"}
    assert event["seq"] == 1
    assert event["at"].endswith("+00:00")


def test_engine_emits_item_and_batch_events(memory_engine, capsys):
    engine = memory_engine
    engine.emitter = EventEmitter(enabled=True)
    run_batch(BatchSpec(name="b", items=[ItemParams(operation="readFile", file_path="x.xlsx")]), engine)
    events = _events(capsys)
    assert [e["event"] for e in events] == ["item.start", "item.done", "batch.done"]
    assert events[1]["data"]["success"] is False
    assert events[1]["data"]["error"] is None
    assert events[2]["data"]["ok"] is True


def test_explicit_stream_and_sequence_numbers():
    buf = io.StringIO()
    emitter = EventEmitter(enabled=True, stream=buf)
    emitter.emit("a")
    emitter.emit("b", {"n": 2})
    lines = [json.loads(line) for line in buf.getvalue().splitlines()]
    assert [(e["seq"], e["event"]) for e in lines] == [(1, "a"), (2, "b")]
    assert lines[0]["data"] == {}
