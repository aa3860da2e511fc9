"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import openpyxl
import pytest
from openpyxl import Workbook
from openpyxl.worksheet.table import Table, TableStyleInfo

from sheetman.adapters.openpyxl_codec import OpenpyxlCodec
from sheetman.config import Settings
from sheetman.contracts.common import StorageError
from sheetman.engine.operations import TableOperationEngine
from sheetman.io.storage import LocalStorage
from sheetman.tabular.model import WorkbookModel


def _save_and_reload(wb: Workbook, path: Path) -> None:
    """Save workbook and reload so tableColumns get populated."""
    wb.save(str(path))
    wb2 = openpyxl.load_workbook(str(path))
    wb2.save(str(path))
    wb2.close()


class MemoryStorage:
    """Dict-backed storage with the same path rules as LocalStorage."""

    def __init__(self, base_dir: str = "/data/sheet-manager", default_path: str = "/tmp/data.xlsx") -> None:
        self.base_dir = PurePosixPath(base_dir)
        self.default_path = default_path
        self.files: dict[PurePosixPath, bytes] = {}
        self.writes = 0

    def resolve(self, path: str) -> PurePosixPath:
        p = PurePosixPath(path or self.default_path)
        return p if p.is_absolute() else self.base_dir / p

    def exists(self, path: PurePosixPath) -> bool:
        return path in self.files

    def read_bytes(self, path: PurePosixPath) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise StorageError(f"Could not read {path}: no such file") from None

    def write_bytes(self, path: PurePosixPath, data: bytes) -> None:
        self.files[path] = data
        self.writes += 1

    def delete(self, path: PurePosixPath) -> None:
        if path not in self.files:
            raise StorageError(f"Could not delete {path}: no such file")
        del self.files[path]


class JsonCodec:
    """Codec fake: the logical model as JSON, no workbook container involved."""

    def decode(self, data: bytes) -> WorkbookModel:
        return WorkbookModel.model_validate_json(data)

    def encode(self, model: WorkbookModel) -> bytes:
        return model.model_dump_json().encode()


@pytest.fixture()
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def memory_engine(memory_storage: MemoryStorage) -> TableOperationEngine:
    """Engine over in-memory storage and the JSON codec fake."""
    return TableOperationEngine(memory_storage, JsonCodec(), Settings())


@pytest.fixture()
def disk_engine(tmp_path: Path) -> TableOperationEngine:
    """Engine over the real filesystem (base dir = tmp_path) and openpyxl."""
    settings = Settings(base_dir=str(tmp_path), default_path=str(tmp_path / "data.xlsx"))
    return TableOperationEngine(LocalStorage(settings.base_dir, settings.default_path), OpenpyxlCodec(), settings)


@pytest.fixture()
def people_workbook(tmp_path: Path) -> Path:
    """A plain (no Excel table) sheet: Name/Age with a case-variant duplicate."""
    wb = Workbook()
    ws = wb.active
    ws.title = "People"
    ws.append(["Name", "Age"])
    ws.append(["Ana", 30])
    ws.append(["ana", 31])
    ws.append(["Bob", 40])
    ws2 = wb.create_sheet("Notes")
    ws2["A1"] = "Note"
    ws2["A2"] = "keep me"
    path = tmp_path / "people.xlsx"
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture()
def gapped_workbook(tmp_path: Path) -> Path:
    """Header row with a blank interior cell: Name, <blank>, City."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Data"
    ws.append(["Name", None, "City"])
    ws.append(["Ana", "x", "Lima"])
    ws.append(["Bob", "y", "Quito"])
    path = tmp_path / "gapped.xlsx"
    wb.save(str(path))
    wb.close()
    return path


@pytest.fixture()
def table_workbook(tmp_path: Path) -> Path:
    """A sheet whose data is an Excel table anchored at A1."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Orders"
    ws.append(["OrderID", "Product", "Qty"])
    ws.append([101, "Widget", 5])
    ws.append([102, "Gadget", 3])
    tab = Table(displayName="OrdersTbl", ref="A1:C3")
    tab.tableStyleInfo = TableStyleInfo(name="TableStyleMedium2", showRowStripes=True)
    ws.add_table(tab)
    path = tmp_path / "orders.xlsx"
    _save_and_reload(wb, path)
    return path
