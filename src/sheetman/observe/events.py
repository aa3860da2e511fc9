"""Item and batch lifecycle events (NDJSON) and duration measurement."""

from __future__ import annotations

import itertools
import sys
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, TextIO

import orjson

if TYPE_CHECKING:
    from sheetman.contracts.results import BatchResult, ItemResult


class Timer:
    """Wall time of a ``with`` block, in whole milliseconds."""

    def __init__(self) -> None:
        self._t0 = 0.0
        self.elapsed_ms = 0

    def __enter__(self) -> "Timer":
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.elapsed_ms = round((time.perf_counter() - self._t0) * 1000)


class EventEmitter:
    """Writes one JSON object per line for each lifecycle event.

    Records look like ``{"seq": 1, "event": "item.start", "at": "...", "data": {...}}``.
    ``seq`` counts per emitter, so a host reading interleaved output can
    restore the order. Events go to ``stream``, or to whatever ``sys.stderr``
    is at emit time.
    """

    def __init__(self, enabled: bool = False, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self._stream = stream
        self._seq = itertools.count(1)

    def emit(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        record = {
            "seq": next(self._seq),
            "event": event,
            "at": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "data": data or {},
        }
        out = self._stream or sys.stderr
        out.write(orjson.dumps(record, default=str, option=orjson.OPT_APPEND_NEWLINE).decode())
        out.flush()

    def item_started(self, operation: str, file: str) -> None:
        self.emit("item.start", {"operation": operation, "file": file})

    def item_finished(self, result: "ItemResult") -> None:
        self.emit("item.done", {
            "operation": result.operation,
            "file": result.target.file,
            "success": result.success,
            "error": result.error.code if result.error else None,
            "duration_ms": result.metrics.duration_ms,
        })

    def batch_finished(self, summary: "BatchResult") -> None:
        self.emit("batch.done", {
            "name": summary.name,
            "ok": summary.ok,
            "failed": summary.items_failed,
            "skipped": summary.items_skipped,
        })
