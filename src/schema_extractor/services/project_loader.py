"""File-system collaborator: discovers and reads an AL project's sources."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.shared.constants import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_MANIFEST_NAME,
    DEFAULT_SOURCE_GLOB,
)
from src.shared.errors import ProjectNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ProjectSource:
    """Everything the scanner needs from one project directory."""

    root: Path
    files: dict[str, str] = field(default_factory=dict)
    manifest: dict[str, Any] | None = None
    project_name: str | None = None
    errors: list[str] = field(default_factory=list)


class ProjectLoader:
    """Reads a project's manifest and source files from disk.

    Source files are keyed by their POSIX path relative to the project
    root.  Unreadable files and a malformed manifest are reported in
    ``ProjectSource.errors`` rather than raised.
    """

    def __init__(
        self,
        source_glob: str = DEFAULT_SOURCE_GLOB,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
        exclude_dirs: list[str] | None = None,
    ) -> None:
        self._source_glob = source_glob
        self._manifest_name = manifest_name
        self._exclude_dirs = set(
            DEFAULT_EXCLUDE_DIRS if exclude_dirs is None else exclude_dirs
        )

    def load(self, project_dir: str | Path) -> ProjectSource:
        """Load manifest and sources from *project_dir*.

        Raises:
            ProjectNotFoundError: If *project_dir* is not a directory.
        """
        root = Path(project_dir)
        if not root.is_dir():
            raise ProjectNotFoundError(f"Project directory not found: {project_dir}")

        source = ProjectSource(root=root)
        source.manifest = self._read_manifest(root, source.errors)
        if source.manifest is not None:
            name = source.manifest.get("name")
            source.project_name = str(name) if name else None

        for path in self.discover(root):
            rel_path = path.relative_to(root).as_posix()
            try:
                source.files[rel_path] = path.read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Failed to read %s: %s", rel_path, exc,
                               extra={"file_path": rel_path})
                source.errors.append(f"Error while reading {rel_path}: {exc}")

        logger.info("Loaded %d source file(s) from %s", len(source.files), root)
        return source

    def discover(self, root: Path) -> list[Path]:
        """Return matching source files under *root*, sorted, exclusions skipped."""
        matches: list[Path] = []
        for path in root.glob(self._source_glob):
            if not path.is_file():
                continue
            parts = path.relative_to(root).parts[:-1]
            if any(part in self._exclude_dirs for part in parts):
                continue
            matches.append(path)
        return sorted(matches)

    def detect_project(self, project_dir: str | Path) -> bool:
        """True when the manifest exists and at least one source file matches."""
        root = Path(project_dir)
        if not (root / self._manifest_name).is_file():
            return False
        return bool(self.discover(root))

    def _read_manifest(self, root: Path, errors: list[str]) -> dict[str, Any] | None:
        manifest_path = root / self._manifest_name
        if not manifest_path.is_file():
            return None
        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            errors.append(f"Error while reading {self._manifest_name}: {exc}")
            return None
        if not isinstance(data, dict):
            errors.append(f"Error while reading {self._manifest_name}: expected a JSON object")
            return None
        return data
