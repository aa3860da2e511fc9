"""Item and batch result models."""

from __future__ import annotations

import base64
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, Field

from sheetman.contracts.common import ErrorDetail, Metrics, Target, WarningDetail

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class BinaryAttachment(BaseModel):
    """Serialized workbook bytes, base64-encoded for transport."""

    data: str
    mime_type: str = XLSX_MIME_TYPE
    file_name: str
    size: int = 0

    @classmethod
    def from_bytes(cls, payload: bytes, path: str | PurePath) -> "BinaryAttachment":
        return cls(
            data=base64.b64encode(payload).decode("ascii"),
            file_name=PurePath(path).name,
            size=len(payload),
        )

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class ItemResult(BaseModel):
    """Outcome of one operation.

    ``success=False`` with no ``error`` is a soft outcome (nothing to read,
    nothing matched); an ``error`` marks a hard failure.
    """

    success: bool = True
    message: str = ""
    operation: str = ""
    target: Target = Field(default_factory=Target)
    rows: list[dict[str, Any]] | None = None
    headers: list[str] | None = None
    row_count: int | None = None
    updated: int | None = None
    dry_run: bool = False
    binary: BinaryAttachment | None = None
    error: ErrorDetail | None = None
    warnings: list[WarningDetail] = Field(default_factory=list)
    metrics: Metrics = Field(default_factory=Metrics)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def soft(self) -> bool:
        return not self.success and self.error is None


class BatchResult(BaseModel):
    """Combined outcome of a batch run."""

    name: str = ""
    ok: bool = True
    items_total: int = 0
    items_succeeded: int = 0
    items_soft: int = 0
    items_failed: int = 0
    items_skipped: int = 0
    items: list[ItemResult] = Field(default_factory=list)
