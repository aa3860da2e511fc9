"""Per-item parameter model."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from sheetman.contracts.common import InvalidInputError

Operation = Literal["readFile", "view", "create", "edit", "deleteFile"]
HeaderMode = Literal["legacy", "strict"]


class ItemParams(BaseModel):
    """Options recognized for one batch item.

    Field names are snake_case; the camelCase names used by workflow hosts
    (``filePath``, ``sheetName``, ``defaultFillValue`` ...) are accepted too.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    operation: Operation = "view"
    file_path: str = ""
    file_name: str | None = None  # create only; sets the workbook title
    sheet_name: str = ""
    append: bool = False
    headers: list[str] = Field(default_factory=list)
    default_fill_value: str = "null"
    data: Any = "[]"
    condition_column: str = ""
    condition_value: Any = ""
    target_column: str = ""
    new_value: Any = None
    header_mode: HeaderMode | None = None
    dry_run: bool = False

    @field_validator("headers", mode="before")
    @classmethod
    def _unwrap_header_collection(cls, v: Any) -> Any:
        # {"headersValues": [{"header": "Name"}, ...]} as sent by form-style hosts
        if v is None:
            return []
        if isinstance(v, dict):
            v = v.get("headersValues") or []
        if isinstance(v, list):
            return [h.get("header", "") if isinstance(h, dict) else h for h in v]
        return v

    def records(self) -> list[dict[str, Any]]:
        """Return ``data`` as a list of records, decoding JSON text if needed."""
        data = self.data
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise InvalidInputError(f'The "data" field is not valid JSON: {e}') from e
        if not isinstance(data, list):
            raise InvalidInputError('The "data" field must be an array of objects.')
        for idx, record in enumerate(data):
            if not isinstance(record, dict):
                raise InvalidInputError(
                    f'The "data" field must be an array of objects; item {idx} is '
                    f"{type(record).__name__}."
                )
        return data
