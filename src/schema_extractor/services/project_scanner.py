"""Project-wide scan: per-file parsing, extension merge, relation derivation.

The scanner consumes a mapping of file path to raw text and produces a
single :class:`ProjectScanResult`.  Phases run strictly in order:

1. parse every file independently (optionally on a thread pool),
2. merge table extension fields into the base tables they extend,
3. drop special-purpose "cue" tables,
4. derive one relation per foreign-key field.

A file that cannot be decoded or parsed is recorded in
``ProjectScanResult.errors`` and skipped; it never aborts the scan.
"""
from __future__ import annotations

import concurrent.futures
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, NamedTuple

from src.schema_extractor.parsers.naming import PrefixNormalizer
from src.schema_extractor.parsers.table_parser import TableParser
from src.shared.constants import (
    NO_SOURCE_FILES_WARNING,
    NO_TABLES_WARNING,
    SPECIAL_ENTITY_MARKER,
    SPECIAL_ENTITY_SUFFIXES,
)
from src.shared.errors import ParsingError
from src.shared.models.schema import ProjectScanResult, SchemaRelation, TableObject

logger = logging.getLogger(__name__)

SourceContent = str | bytes


class _FileOutcome(NamedTuple):
    path: str
    tables: list[TableObject]
    error: str | None


class ProjectScanner:
    """Scans a whole project's sources into one merged schema."""

    def __init__(
        self,
        parser: TableParser | None = None,
        max_workers: int = 1,
    ) -> None:
        self._parser = parser or TableParser()
        self._max_workers = max(1, max_workers)

    @classmethod
    def with_prefix(cls, prefix: str | None, max_workers: int = 1) -> "ProjectScanner":
        """Build a scanner whose parser strips *prefix* from names."""
        return cls(TableParser(PrefixNormalizer(prefix)), max_workers=max_workers)

    @property
    def parser(self) -> TableParser:
        return self._parser

    def scan(
        self,
        files: Mapping[str, SourceContent],
        project_name: str | None = None,
        manifest: dict[str, Any] | None = None,
        root: str | Path | None = None,
    ) -> ProjectScanResult:
        """Scan *files* and return the merged result.

        Args:
            files: Mapping of file path to raw text (``bytes`` are decoded
                as UTF-8).
            project_name: Declared project name, passed through.
            manifest: Parsed project manifest, passed through.
            root: Project root used to relativize paths in error messages.

        Returns:
            The scan result; iteration order of *files* determines the
            order of tables and relations.
        """
        result = ProjectScanResult(project_name=project_name, manifest=manifest)
        if not files:
            result.errors.append(NO_SOURCE_FILES_WARNING)
            return result

        tables: list[TableObject] = []
        for outcome in self._parse_all(files, root):
            if outcome.error is not None:
                result.errors.append(outcome.error)
                continue
            tables.extend(outcome.tables)

        merge_extensions(tables)
        result.tables = [t for t in tables if not is_special_table(t)]
        result.relations = derive_relations(result.tables)

        if not result.tables:
            result.errors.append(NO_TABLES_WARNING)

        logger.info(
            "Scanned %d file(s): %d table(s), %d extension(s), %d relation(s), %d error(s)",
            len(files), result.table_count, result.extension_count,
            len(result.relations), len(result.errors),
            extra={"project": project_name, "object_count": len(result.tables)},
        )
        return result

    def _parse_all(
        self, files: Mapping[str, SourceContent], root: str | Path | None
    ) -> list[_FileOutcome]:
        items = list(files.items())
        if self._max_workers == 1 or len(items) < 2:
            return [self._parse_one(path, content, root) for path, content in items]

        # Executor.map yields in submission order, keeping results deterministic
        with concurrent.futures.ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            return list(
                pool.map(lambda item: self._parse_one(item[0], item[1], root), items)
            )

    def _parse_one(
        self, path: str, content: SourceContent, root: str | Path | None
    ) -> _FileOutcome:
        try:
            text = _decode(content, path)
            return _FileOutcome(path, self._parser.parse_file(text, path), None)
        except (ParsingError, ValueError, TypeError, RuntimeError) as exc:
            rel_path = _relative_path(path, root)
            logger.warning(
                "Failed to parse %s: %s", rel_path, exc, extra={"file_path": rel_path}
            )
            return _FileOutcome(path, [], f"Error while parsing {rel_path}: {exc}")


def merge_extensions(tables: list[TableObject]) -> None:
    """Copy table extension fields into the base tables they extend.

    Fields already present on the base (case-insensitive name match) are
    skipped, so the first declaration wins.  Extensions of tables outside
    the project are left untouched.  Extension objects stay in *tables*.
    When two base tables share a name case-insensitively, the first one
    declared receives the extension fields.
    """
    bases: dict[str, TableObject] = {}
    for table in tables:
        if not table.is_extension:
            bases.setdefault(table.name.lower(), table)

    for ext in tables:
        if not ext.is_extension or not ext.extends_table:
            continue
        base = bases.get(ext.extends_table.lower())
        if base is None:
            continue
        existing = {f.name.lower() for f in base.fields}
        for field in ext.fields:
            if field.name.lower() in existing:
                continue
            base.fields.append(field.model_copy(deep=True))
            existing.add(field.name.lower())


def is_special_entity(name: str) -> bool:
    """Return True for UI-summary pseudo tables such as ``Sales Cue``."""
    lowered = name.lower()
    return lowered.endswith(SPECIAL_ENTITY_SUFFIXES) or SPECIAL_ENTITY_MARKER in lowered


def is_special_table(table: TableObject) -> bool:
    return is_special_entity(table.name) or (
        table.is_extension and is_special_entity(table.extends_table)
    )


def derive_relations(tables: list[TableObject]) -> list[SchemaRelation]:
    """Emit one relation per foreign-key field with a resolved target.

    Fields of an extension are attributed to the table it extends.
    Relations pointing at special entities are dropped.
    """
    relations: list[SchemaRelation] = []
    for table in tables:
        source = table.entity_name
        for field in table.fields:
            if not field.is_foreign_key or not field.related_table:
                continue
            if is_special_entity(field.related_table):
                continue
            relations.append(
                SchemaRelation(
                    source_entity=source,
                    source_field=field.name,
                    target_entity=field.related_table,
                    target_field=field.related_field,
                )
            )
    return relations


def _decode(content: SourceContent, path: str) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParsingError(f"content is not valid UTF-8 ({exc.reason})") from exc
    raise ParsingError(f"unsupported content type {type(content).__name__} for {path}")


def _relative_path(path: str, root: str | Path | None) -> str:
    if root is None:
        return path
    try:
        return Path(path).relative_to(root).as_posix()
    except ValueError:
        return path
