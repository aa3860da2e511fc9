"""Low-level file helpers: atomic replace, sidecar lock, BOM-tolerant reads."""

from __future__ import annotations

import os
import tempfile
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any

import portalocker

LOCK_SUFFIX = ".sheetman.lock"

_POLL_INTERVAL = 0.05


def atomic_write(target: str | Path, data: bytes) -> None:
    """Write ``data`` to a temp file beside ``target`` and ``os.replace`` it in."""
    target = Path(target)
    fd, name = tempfile.mkstemp(dir=target.parent, prefix=".sheetman_tmp_", suffix=target.suffix)
    tmp = Path(name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def lock_path_for(path: str | Path) -> Path:
    """Sidecar lock file for a workbook: ``<name>.sheetman.lock`` in the same directory."""
    path = Path(path).resolve()
    return path.with_name(path.name + LOCK_SUFFIX)


def _acquire(handle: IO[Any], timeout: float) -> None:
    # non-blocking attempts until the deadline; timeout <= 0 means one attempt
    deadline = time.monotonic() + max(timeout, 0)
    while True:
        try:
            portalocker.lock(handle, portalocker.LOCK_EX | portalocker.LOCK_NB)
            return
        except portalocker.LockException:
            if time.monotonic() >= deadline:
                raise
            time.sleep(_POLL_INTERVAL)


class WorkbookLock:
    """Exclusive sidecar lock held around one read-modify-write of a workbook.

    Raises ``portalocker.LockException`` when another handle holds the lock
    past ``timeout`` seconds. The sidecar stays on disk after release and
    records the holder's pid and acquisition time.
    """

    def __init__(self, workbook_path: str | Path, *, timeout: float = 0) -> None:
        self.lock_path = lock_path_for(workbook_path)
        self.timeout = timeout
        self._handle: IO[Any] | None = None

    def __enter__(self) -> "WorkbookLock":
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        handle = self.lock_path.open("a+")
        try:
            _acquire(handle, self.timeout)
        except BaseException:
            handle.close()
            raise
        handle.seek(0)
        handle.truncate()
        handle.write(f"pid={os.getpid()}\ntime={datetime.now(timezone.utc).isoformat()}\n")
        handle.flush()
        self._handle = handle
        return self

    def __exit__(self, *exc: Any) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            portalocker.unlock(handle)
        finally:
            handle.close()


def read_text_safe(path: str | Path) -> str:
    """Read UTF-8 text, dropping a leading BOM if present."""
    return Path(path).read_text(encoding="utf-8-sig")
