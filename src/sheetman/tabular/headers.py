"""Header extraction and reconciliation.

A sheet's header set is derived from up to three sources, in priority order:
the headers already present in the sheet, user supplied overrides, and the
keys found in incoming records. The result keeps the first occurrence of
each name.
"""

from __future__ import annotations

from typing import Any, Iterable

from sheetman.tabular.cells import cell_text
from sheetman.tabular.model import SheetModel

HEADER_MODES = frozenset({"legacy", "strict"})


def extract_headers(sheet: SheetModel, mode: str = "legacy") -> list[str]:
    """Read the header list of a loaded sheet.

    Explicit column metadata wins when it yields at least one header.
    Otherwise the first physical row is scanned left to right.

    mode: ``legacy`` drops blank header cells, so with interior blanks the
    list index no longer matches the physical column. ``strict`` keeps an
    empty-string placeholder for each blank cell instead.
    """
    if mode not in HEADER_MODES:
        raise ValueError(f"Unknown header mode '{mode}'. Valid: {', '.join(sorted(HEADER_MODES))}")

    from_meta = [c.header.strip() for c in sheet.columns]
    if any(from_meta):
        names = from_meta
    else:
        names = [cell_text(value).strip() for value in sheet.header_row()]

    headers = [h for h in names if h or mode == "strict"]
    if mode == "strict":
        # trailing placeholders carry no position information
        while headers and not headers[-1]:
            headers.pop()
    return headers


def user_headers(raw: Iterable[Any] | None) -> list[str]:
    """Ordered, non-empty entries of a user override list."""
    if not raw:
        return []
    return [str(h) for h in raw if h]


def data_headers(records: Iterable[Any]) -> list[str]:
    """Keys of every record, in record order, first occurrence wins."""
    seen: dict[str, None] = {}
    for record in records:
        if isinstance(record, dict):
            for key in record:
                seen.setdefault(key, None)
    return list(seen)


def resolve_headers(
    existing: list[str],
    user: list[str],
    records: list[dict[str, Any]],
) -> list[str]:
    """Unify existing, user and data-derived headers without duplicates.

    Empty-string placeholders in ``existing`` (strict extraction) keep their
    position and are never merged with one another.
    """
    resolved: list[str] = []
    seen: set[str] = set()
    for name in existing:
        if name == "":
            resolved.append(name)
            continue
        if name not in seen:
            seen.add(name)
            resolved.append(name)
    for name in [*user, *data_headers(records)]:
        if name not in seen:
            seen.add(name)
            resolved.append(name)
    return resolved
