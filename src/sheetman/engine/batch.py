"""Batch runner for ``sheetman run``: executes items from a YAML/JSON spec."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import ValidationError

from sheetman.contracts.batch import BatchSpec
from sheetman.contracts.params import ItemParams
from sheetman.contracts.results import BatchResult, ItemResult
from sheetman.engine.operations import TableOperationEngine
from sheetman.io.fileops import read_text_safe


class BatchValidationError(ValueError):
    """Raised when a batch file cannot be loaded."""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


def load_batch(path: str | Path) -> BatchSpec:
    """Load a batch from a YAML (or JSON) file."""
    data = yaml.safe_load(read_text_safe(path))
    if isinstance(data, list):
        data = {"items": data}
    if not isinstance(data, dict):
        raise BatchValidationError("Batch file must be a mapping/object or a list of items.")

    allowed_keys = {"schema_version", "name", "defaults", "items"}
    unknown_keys = sorted(set(data) - allowed_keys)
    if unknown_keys:
        raise BatchValidationError(f"Unknown batch keys: {', '.join(unknown_keys)}")

    items = data.get("items")
    if not isinstance(items, list):
        raise BatchValidationError("Batch must define 'items' as an array.")
    if not items:
        raise BatchValidationError("Batch must contain at least one item.")

    try:
        return BatchSpec(**data)
    except ValidationError as e:
        issues = [
            {"loc": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise BatchValidationError(f"Invalid batch file: {len(issues)} issue(s)", issues) from e


def run_items(
    engine: TableOperationEngine,
    items: Iterable[ItemParams],
    *,
    continue_on_fail: bool = False,
) -> tuple[list[ItemResult], int]:
    """Run items strictly in order.

    After a hard failure the remaining items are skipped unless
    ``continue_on_fail``. Soft outcomes never stop the run. Returns the
    results produced and the number of skipped items.
    """
    results: list[ItemResult] = []
    pending = list(items)
    for idx, params in enumerate(pending):
        result = engine.execute(params)
        results.append(result)
        if result.failed and not continue_on_fail:
            return results, len(pending) - idx - 1
    return results, 0


def run_batch(
    spec: BatchSpec,
    engine: TableOperationEngine,
    *,
    continue_on_fail: bool | None = None,
) -> BatchResult:
    """Execute a loaded batch and summarize the outcome."""
    keep_going = spec.defaults.continue_on_fail if continue_on_fail is None else continue_on_fail
    items = spec.items
    if spec.defaults.dry_run:
        items = [p.model_copy(update={"dry_run": True}) for p in items]

    results, skipped = run_items(engine, items, continue_on_fail=keep_going)
    failed = sum(1 for r in results if r.failed)
    summary = BatchResult(
        name=spec.name,
        ok=failed == 0 and skipped == 0,
        items_total=len(spec.items),
        items_succeeded=sum(1 for r in results if r.success),
        items_soft=sum(1 for r in results if r.soft),
        items_failed=failed,
        items_skipped=skipped,
        items=results,
    )
    engine.emitter.batch_finished(summary)
    return summary
