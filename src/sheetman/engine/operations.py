"""TableOperationEngine: readFile, view, create, edit and deleteFile."""

from __future__ import annotations

import contextlib
import logging
from datetime import datetime
from pathlib import PurePath
from typing import Any, Callable, Iterator

import portalocker

from sheetman.config import Settings
from sheetman.contracts.common import (
    ErrorDetail,
    LockHeldError,
    Metrics,
    NotFoundError,
    SheetManagerError,
    SheetNotFoundError,
    StorageError,
    Target,
    WarningDetail,
)
from sheetman.contracts.params import ItemParams
from sheetman.contracts.results import BinaryAttachment, ItemResult
from sheetman.engine.ports import Codec, Storage
from sheetman.io.fileops import WorkbookLock
from sheetman.observe.events import EventEmitter, Timer
from sheetman.tabular.cells import to_cell
from sheetman.tabular.headers import extract_headers, resolve_headers, user_headers
from sheetman.tabular.matcher import Condition, Mutation, find_and_update
from sheetman.tabular.model import SheetModel, WorkbookModel
from sheetman.tabular.normalize import fill_value_from, normalize_records, records_from_sheet

logger = logging.getLogger(__name__)


class TableOperationEngine:
    """Runs one item at a time against storage through the codec.

    Workbooks are loaded per item and never cached.
    """

    def __init__(
        self,
        storage: Storage,
        codec: Codec,
        settings: Settings | None = None,
        emitter: EventEmitter | None = None,
    ) -> None:
        self.storage = storage
        self.codec = codec
        self.settings = settings or Settings()
        self.emitter = emitter or EventEmitter(enabled=self.settings.events)
        self._handlers: dict[str, Callable[[ItemParams, PurePath], ItemResult]] = {
            "readFile": self.read_file,
            "view": self.view,
            "create": self.create,
            "edit": self.edit,
            "deleteFile": self.delete_file,
        }

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------
    def execute(self, params: ItemParams) -> ItemResult:
        """Run one item. Failures come back as a result with ``error`` set."""
        path = self.storage.resolve(params.file_path)
        target = Target(file=str(path), sheet=params.sheet_name or None)
        self.emitter.item_started(params.operation, str(path))

        with Timer() as t:
            try:
                result = self._handlers[params.operation](params, path)
            except SheetManagerError as e:
                result = ItemResult(success=False, message=e.message, error=ErrorDetail.from_exception(e))
            except Exception as e:
                logger.exception("%s failed on %s", params.operation, path)
                result = ItemResult(
                    success=False,
                    message=str(e),
                    error=ErrorDetail(code="ERR_INTERNAL", message=str(e)),
                )

        result.operation = params.operation
        result.target = target
        result.metrics = Metrics(duration_ms=t.elapsed_ms)
        self.emitter.item_finished(result)
        return result

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def _locked(self, path: PurePath) -> Iterator[None]:
        if not self.settings.lock:
            yield
            return
        try:
            with WorkbookLock(path, timeout=self.settings.lock_timeout):
                yield
        except portalocker.LockException as e:
            raise LockHeldError(f'The file "{path.name}" is locked by another process.') from e
        except OSError as e:
            raise StorageError(f"Cannot lock {path}: {e}") from e

    def _load(self, path: PurePath) -> WorkbookModel:
        return self.codec.decode(self.storage.read_bytes(path))

    def _require_file(self, path: PurePath) -> None:
        if not self.storage.exists(path):
            raise NotFoundError(f'The file "{path.name}" does not exist.', details={"path": str(path)})

    @staticmethod
    def _require_sheet(model: WorkbookModel, name: str) -> SheetModel:
        sheet = model.get_sheet(name)
        if sheet is None:
            raise SheetNotFoundError(
                f'The sheet "{name}" does not exist in the file.',
                details={"sheet": name, "available": model.sheet_names},
            )
        return sheet

    def _header_mode(self, params: ItemParams) -> str:
        return params.header_mode or self.settings.header_mode

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------
    def read_file(self, params: ItemParams, path: PurePath) -> ItemResult:
        """Return the stored bytes untouched. A missing file is a soft outcome."""
        if not self.storage.exists(path):
            message = f'The file "{path.name}" does not exist.'
            return ItemResult(
                success=False,
                message=message,
                warnings=[WarningDetail(code="WARN_FILE_MISSING", message=message, path=str(path))],
            )
        data = self.storage.read_bytes(path)
        return ItemResult(
            success=True,
            message=f'Read "{path.name}".',
            binary=BinaryAttachment.from_bytes(data, path),
        )

    def view(self, params: ItemParams, path: PurePath) -> ItemResult:
        """Return the sheet's data rows as records plus a re-encoded copy."""
        self._require_file(path)
        model = self._load(path)
        sheet = self._require_sheet(model, params.sheet_name)
        headers = extract_headers(sheet, self._header_mode(params))
        rows = records_from_sheet(sheet, headers) if headers else []
        payload = self.codec.encode(model)
        return ItemResult(
            success=True,
            message=f'Read {len(rows)} rows from sheet "{sheet.name}".',
            rows=rows,
            headers=[h for h in headers if h],
            row_count=len(rows),
            binary=BinaryAttachment.from_bytes(payload, path),
        )

    def create(self, params: ItemParams, path: PurePath) -> ItemResult:
        """Create the sheet or replace/append its rows, then persist."""
        records = params.records()
        mode = self._header_mode(params)

        with self._locked(path):
            file_exists = self.storage.exists(path)
            model = self._load(path) if file_exists else WorkbookModel()

            sheet = model.get_sheet(params.sheet_name)
            is_new_sheet = sheet is None
            if sheet is None:
                sheet = model.add_sheet(params.sheet_name)

            existing: list[str] = []
            if file_exists and params.append and not is_new_sheet:
                existing = extract_headers(sheet, mode)
            headers = resolve_headers(existing, user_headers(params.headers), records)

            cleared = 0
            if not params.append and sheet.row_count > 0:
                cleared = sheet.clear()
            sheet.set_columns(headers)

            fill = fill_value_from(params.default_fill_value)
            added = sheet.add_records(normalize_records(records, headers, fill))

            now = datetime.now()
            model.creator = self.settings.creator
            model.last_modified_by = self.settings.last_modified_by
            model.created = now
            model.modified = now
            model.title = params.file_name or path.name

            if not params.dry_run:
                self.storage.write_bytes(path, self.codec.encode(model))

        logger.debug("create %s[%s]: %d rows added, %d cleared", path, sheet.name, added, cleared)
        return ItemResult(
            success=True,
            message=f'File "{path.name}" saved.' if not params.dry_run else f'File "{path.name}" not saved (dry run).',
            headers=[h for h in headers if h],
            row_count=max(sheet.row_count - 1, 0),
            dry_run=params.dry_run,
        )

    def edit(self, params: ItemParams, path: PurePath) -> ItemResult:
        """Update every row matching the condition. Zero matches is a soft outcome."""
        self._require_file(path)

        with self._locked(path):
            model = self._load(path)
            sheet = self._require_sheet(model, params.sheet_name)
            headers = extract_headers(sheet, self._header_mode(params))

            condition = Condition(params.condition_column, params.condition_value)
            mutation = Mutation(params.target_column or params.condition_column, to_cell(params.new_value))
            updated = find_and_update(sheet, headers, condition, mutation)

            if updated and not params.dry_run:
                self.storage.write_bytes(path, self.codec.encode(model))

        if not updated:
            message = (
                f'No row found with value "{_display(params.condition_value)}" '
                f'in column "{params.condition_column}".'
            )
            return ItemResult(
                success=False,
                message=message,
                updated=0,
                dry_run=params.dry_run,
                warnings=[WarningDetail(code="WARN_NO_MATCH", message=message)],
            )
        return ItemResult(
            success=True,
            message=f"File updated successfully ({updated} rows)." if not params.dry_run
            else f"{updated} rows would be updated (dry run).",
            updated=updated,
            dry_run=params.dry_run,
        )

    def delete_file(self, params: ItemParams, path: PurePath) -> ItemResult:
        """Remove the file. A missing file is a soft outcome."""
        if not self.storage.exists(path):
            message = "The file does not exist, nothing to delete."
            return ItemResult(
                success=False,
                message=message,
                warnings=[WarningDetail(code="WARN_FILE_MISSING", message=message, path=str(path))],
            )
        with self._locked(path):
            self.storage.delete(path)
        return ItemResult(success=True, message=f'File "{path.name}" deleted.')


def _display(value: Any) -> str:
    return "" if value is None else str(value)
