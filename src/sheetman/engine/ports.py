"""Interfaces the operation engine depends on."""

from __future__ import annotations

from pathlib import PurePath
from typing import Protocol

from sheetman.tabular.model import WorkbookModel


class Codec(Protocol):
    def decode(self, data: bytes) -> WorkbookModel: ...

    def encode(self, model: WorkbookModel) -> bytes: ...


class Storage(Protocol):
    def resolve(self, path: str) -> PurePath: ...

    def exists(self, path: PurePath) -> bool: ...

    def read_bytes(self, path: PurePath) -> bytes: ...

    def write_bytes(self, path: PurePath, data: bytes) -> None: ...

    def delete(self, path: PurePath) -> None: ...
