"""Error taxonomy and the envelope models shared by engine and CLI."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SheetManagerError(Exception):
    """Base class for failures that abort a single item."""

    code = "ERR_INTERNAL"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(SheetManagerError):
    """Raised when a required workbook or sheet does not exist."""

    code = "ERR_WORKBOOK_NOT_FOUND"


class SheetNotFoundError(NotFoundError):
    code = "ERR_SHEET_NOT_FOUND"


class InvalidInputError(SheetManagerError):
    """Raised when item parameters or the data payload are malformed."""

    code = "ERR_INVALID_INPUT"


class ColumnNotFoundError(SheetManagerError):
    """Raised when a named column is absent from the sheet headers."""

    code = "ERR_COLUMN_NOT_FOUND"

    def __init__(self, message: str, *, column: str, available: list[str]) -> None:
        super().__init__(message, details={"column": column, "available": available})
        self.column = column
        self.available = available


class StorageError(SheetManagerError):
    """Raised when the storage layer fails to read, write or delete."""

    code = "ERR_IO"


class WorkbookCorruptError(StorageError):
    """Raised when a workbook file cannot be parsed."""

    code = "ERR_WORKBOOK_CORRUPT"


class LockHeldError(StorageError):
    """Raised when another process holds the workbook's sidecar lock."""

    code = "ERR_LOCK_HELD"


class Target(BaseModel):
    """Identifies the target file/sheet for an item."""

    file: str | None = None
    sheet: str | None = None


class WarningDetail(BaseModel):
    """Why an item ended as a soft outcome (``WARN_FILE_MISSING``, ``WARN_NO_MATCH``)."""

    code: str
    message: str
    path: str | None = None


class ErrorDetail(BaseModel):
    """Hard failure of an item or command: a stable code plus context."""

    code: str
    message: str
    details: dict[str, Any] | None = None

    @classmethod
    def from_exception(cls, exc: SheetManagerError) -> "ErrorDetail":
        return cls(code=exc.code, message=exc.message, details=exc.details)


class Metrics(BaseModel):
    """Timing attached to every item and envelope."""

    duration_ms: int = 0


class ResponseEnvelope(BaseModel):
    """JSON document printed by every CLI command.

    ``ok`` is false for both soft outcomes (``errors`` empty) and failures.
    """

    ok: bool = True
    command: str = ""
    target: Target = Field(default_factory=Target)
    result: Any = None
    warnings: list[WarningDetail] = Field(default_factory=list)
    errors: list[ErrorDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)
