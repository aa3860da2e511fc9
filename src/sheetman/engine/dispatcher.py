"""Response envelopes, JSON output and process exit codes."""

from __future__ import annotations

import sys
from typing import Any

import orjson

from sheetman.contracts.common import (
    ColumnNotFoundError,
    ErrorDetail,
    InvalidInputError,
    LockHeldError,
    Metrics,
    NotFoundError,
    ResponseEnvelope,
    SheetNotFoundError,
    StorageError,
    Target,
    WarningDetail,
    WorkbookCorruptError,
)
from sheetman.contracts.results import ItemResult

EXIT_SUCCESS = 0
EXIT_SOFT = 1
EXIT_VALIDATION = 10
EXIT_IO = 50
EXIT_INTERNAL = 90

# Codes raised by the engine. A missing sheet or column is the caller's
# mistake; a missing workbook is treated like any other storage failure.
_EXIT_BY_ERROR_CODE = {
    InvalidInputError.code: EXIT_VALIDATION,
    ColumnNotFoundError.code: EXIT_VALIDATION,
    SheetNotFoundError.code: EXIT_VALIDATION,
    NotFoundError.code: EXIT_IO,
    StorageError.code: EXIT_IO,
    WorkbookCorruptError.code: EXIT_IO,
    LockHeldError.code: EXIT_IO,
}

# CLI-level codes (ERR_INVALID_ARGUMENT, ERR_MISSING_DATA, ERR_BATCH_INVALID ...)
VALIDATION_CODE_MARKERS = ("INVALID", "MISSING_", "USAGE")


def success_envelope(
    command: str,
    result: Any,
    *,
    target: Target | None = None,
    warnings: list[WarningDetail] | None = None,
    duration_ms: int = 0,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        command=command,
        target=target or Target(),
        result=result,
        warnings=warnings or [],
        metrics=Metrics(duration_ms=duration_ms),
    )


def error_envelope(
    command: str,
    code: str,
    message: str,
    *,
    target: Target | None = None,
    details: dict | None = None,
) -> ResponseEnvelope:
    return ResponseEnvelope(
        ok=False,
        command=command,
        target=target or Target(),
        errors=[ErrorDetail(code=code, message=message, details=details)],
    )


def item_envelope(command: str, item: ItemResult, *, include_binary: bool = True) -> ResponseEnvelope:
    """Wrap one item result.

    ``target``, ``warnings``, ``error`` and ``metrics`` move to the envelope;
    everything else becomes ``result``. A soft outcome gives ``ok=False``
    with an empty ``errors`` list.
    """
    hoisted = {"target", "warnings", "error", "metrics"}
    if not include_binary:
        hoisted.add("binary")
    return ResponseEnvelope(
        ok=item.success,
        command=command,
        target=item.target,
        result=item.model_dump(mode="json", exclude=hoisted),
        warnings=list(item.warnings),
        errors=[item.error] if item.error else [],
        metrics=item.metrics,
    )


def output_json(envelope: ResponseEnvelope) -> str:
    return orjson.dumps(envelope.model_dump(mode="json"), option=orjson.OPT_INDENT_2).decode()


def print_response(envelope: ResponseEnvelope) -> None:
    sys.stdout.write(output_json(envelope) + "\n")


def exit_code_for(envelope: ResponseEnvelope) -> int:
    """Exit code for an envelope, decided by its first error code."""
    if envelope.ok:
        return EXIT_SUCCESS
    if not envelope.errors:
        return EXIT_SOFT
    code = envelope.errors[0].code.upper()
    if code in _EXIT_BY_ERROR_CODE:
        return _EXIT_BY_ERROR_CODE[code]
    if any(marker in code for marker in VALIDATION_CODE_MARKERS):
        return EXIT_VALIDATION
    return EXIT_INTERNAL
