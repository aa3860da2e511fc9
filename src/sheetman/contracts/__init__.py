"""Pydantic models for item parameters, results, batches and errors."""

from sheetman.contracts.batch import BatchDefaults, BatchSpec
from sheetman.contracts.common import (
    ColumnNotFoundError,
    ErrorDetail,
    InvalidInputError,
    LockHeldError,
    Metrics,
    NotFoundError,
    ResponseEnvelope,
    SheetManagerError,
    SheetNotFoundError,
    StorageError,
    Target,
    WarningDetail,
    WorkbookCorruptError,
)
from sheetman.contracts.params import ItemParams
from sheetman.contracts.results import BatchResult, BinaryAttachment, ItemResult

__all__ = [
    "BatchDefaults",
    "BatchResult",
    "BatchSpec",
    "BinaryAttachment",
    "ColumnNotFoundError",
    "ErrorDetail",
    "InvalidInputError",
    "ItemParams",
    "ItemResult",
    "LockHeldError",
    "Metrics",
    "NotFoundError",
    "ResponseEnvelope",
    "SheetManagerError",
    "SheetNotFoundError",
    "StorageError",
    "Target",
    "WarningDetail",
    "WorkbookCorruptError",
]
