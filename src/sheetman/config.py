"""Settings: load sheetman.yaml and apply environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel

from sheetman.io.fileops import read_text_safe
from sheetman.io.storage import DEFAULT_BASE_DIR, DEFAULT_PATH

CONFIG_FILENAME = "sheetman.yaml"

_ENV_OVERRIDES = {
    "SHEETMAN_BASE_DIR": "base_dir",
    "SHEETMAN_DEFAULT_PATH": "default_path",
    "SHEETMAN_LOCK": "lock",
}


class Settings(BaseModel):
    """Engine-wide configuration."""

    base_dir: str = DEFAULT_BASE_DIR
    default_path: str = DEFAULT_PATH
    creator: str = "Sheet Manager"
    last_modified_by: str = "sheetman"
    header_mode: Literal["legacy", "strict"] = "legacy"
    lock: bool = False
    lock_timeout: float = 0
    continue_on_fail: bool = False
    events: bool = False

    @classmethod
    def from_mapping(cls, data: dict[str, Any] | None, *, environ: dict[str, str] | None = None) -> "Settings":
        merged = dict(data or {})
        env = os.environ if environ is None else environ
        for var, field in _ENV_OVERRIDES.items():
            if env.get(var):
                merged[field] = env[var]
        return cls(**merged)

    @classmethod
    def load(cls, path: str | Path, *, environ: dict[str, str] | None = None) -> "Settings":
        """Load settings from a YAML file."""
        data = yaml.safe_load(read_text_safe(path)) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping.")
        return cls.from_mapping(data, environ=environ)

    @classmethod
    def load_from_dir(cls, directory: str | Path, *, environ: dict[str, str] | None = None) -> "Settings":
        """Load sheetman.yaml from a directory, falling back to defaults."""
        path = Path(directory) / CONFIG_FILENAME
        if path.exists():
            return cls.load(path, environ=environ)
        return cls.from_mapping(None, environ=environ)
