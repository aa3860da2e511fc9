"""Batch file models for ``sheetman run``."""

from __future__ import annotations

from pydantic import BaseModel, Field

from sheetman.contracts.params import ItemParams


class BatchDefaults(BaseModel):
    continue_on_fail: bool = False
    dry_run: bool = False


class BatchSpec(BaseModel):
    schema_version: str = "1.0"
    name: str = ""
    defaults: BatchDefaults = Field(default_factory=BatchDefaults)
    items: list[ItemParams] = Field(default_factory=list)
