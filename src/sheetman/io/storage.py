"""Local filesystem storage: path resolution and byte-level file access."""

from __future__ import annotations

import logging
from pathlib import Path

from sheetman.contracts.common import StorageError
from sheetman.io.fileops import atomic_write

logger = logging.getLogger(__name__)

DEFAULT_BASE_DIR = "/data/sheet-manager"
DEFAULT_PATH = "/tmp/data.xlsx"


class LocalStorage:
    """Reads and writes workbook files under a base directory.

    Relative paths resolve under ``base_dir``; absolute paths are used
    verbatim. An empty path means ``default_path``.
    """

    def __init__(self, base_dir: str | Path = DEFAULT_BASE_DIR, default_path: str = DEFAULT_PATH) -> None:
        self.base_dir = Path(base_dir)
        self.default_path = default_path

    def resolve(self, path: str) -> Path:
        p = Path(path or self.default_path)
        return p if p.is_absolute() else self.base_dir / p

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def write_bytes(self, path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write(path, data)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        logger.debug("wrote %d bytes to %s", len(data), path)

    def delete(self, path: Path) -> None:
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(
                f"Could not delete the file. Cause: {e}. "
                f"Check the permissions of {path.parent}.",
                details={"path": str(path)},
            ) from e
        logger.debug("deleted %s", path)
