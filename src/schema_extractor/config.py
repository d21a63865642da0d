"""Scan settings dataclass and YAML loader for the command line."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from src.shared.constants import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_MANIFEST_NAME,
    DEFAULT_PROJECT_NAME,
    DEFAULT_SOURCE_GLOB,
)
from src.shared.errors import ValidationError


@dataclass
class ScanSettings:
    """Options controlling discovery and parsing of one project."""

    object_name_prefix: str = ""
    source_glob: str = DEFAULT_SOURCE_GLOB
    manifest_name: str = DEFAULT_MANIFEST_NAME
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    max_workers: int = 1
    default_project_name: str = DEFAULT_PROJECT_NAME


def load_scan_settings(path: Path | str | None = None) -> ScanSettings:
    """Load scan settings from a YAML file.

    Unknown keys are silently ignored so that forward-compatible config
    files work.

    Args:
        path: Path to config YAML.  If ``None`` or the file does not
              exist, returns full defaults.

    Returns:
        Populated settings dataclass.

    Raises:
        ValidationError: If the document is not a mapping or
            ``max_workers`` is not a positive integer.
    """
    if path is None:
        return ScanSettings()

    path = Path(path)
    if not path.exists():
        return ScanSettings()

    with open(path, "r", encoding="utf-8") as f:
        raw: Any = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValidationError(f"Scan settings in {path} must be a mapping")

    valid = {f.name for f in fields(ScanSettings)}
    picked = {k: v for k, v in raw.items() if k in valid}
    if isinstance(picked.get("exclude_dirs"), str):
        picked["exclude_dirs"] = [
            part.strip() for part in picked["exclude_dirs"].split(",") if part.strip()
        ]
    if picked.get("object_name_prefix") is None:
        picked.pop("object_name_prefix", None)

    workers = picked.get("max_workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        raise ValidationError(f"max_workers must be a positive integer, got {workers!r}")
    return ScanSettings(**picked)
