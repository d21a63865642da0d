"""Object-level parsing of AL ``table`` and ``tableextension`` declarations."""
from __future__ import annotations

import logging
import re

from src.schema_extractor.parsers.blocks import (
    extract_block,
    extract_property,
    find_block_start,
)
from src.schema_extractor.parsers.field_parser import parse_fields
from src.schema_extractor.parsers.key_parser import parse_keys
from src.schema_extractor.parsers.naming import PrefixNormalizer
from src.schema_extractor.parsers.relations import resolve_relation
from src.shared.constants import CAPTION_SEARCH_LIMIT
from src.shared.models.schema import ObjectKind, TableObject

logger = logging.getLogger(__name__)

_OBJECT_RE = re.compile(
    r"\b(table|tableextension)\s+(\d+)\s+"
    r'(?:"([^"]+)"|([A-Za-z_]\w*))\s*'
    r'(?:extends\s+(?:"([^"]+)"|([A-Za-z_]\w*)))?\s*\{',
    re.IGNORECASE,
)


class TableParser:
    """Parses every table and table extension declared in one file.

    The parser is stateless apart from its prefix normalizer, so one
    instance can be shared across threads.
    """

    def __init__(self, normalizer: PrefixNormalizer | None = None) -> None:
        self._normalize = normalizer or PrefixNormalizer()

    def parse_file(self, text: str, file_path: str) -> list[TableObject]:
        """Extract all object declarations from *text*.

        Args:
            text: Raw AL source.
            file_path: Path recorded on each parsed object.

        Returns:
            Objects in declaration order; empty when the file declares none.
        """
        objects: list[TableObject] = []
        pos = 0
        while True:
            match = _OBJECT_RE.search(text, pos)
            if match is None:
                break
            body = extract_block(text, match.end())
            pos = match.end() + len(body) + 1
            objects.append(self._build_object(match, body, file_path))

        logger.debug("Parsed %d object(s) from %s", len(objects), file_path)
        return objects

    def _build_object(
        self, match: re.Match[str], body: str, file_path: str
    ) -> TableObject:
        normalize = self._normalize
        fields = parse_fields(body, normalize)
        keys = parse_keys(body, normalize)

        for field in fields:
            if field.table_relation:
                target = resolve_relation(field.table_relation, normalize)
                field.is_foreign_key = True
                field.related_table = target.table
                field.related_field = target.field

        table = TableObject(
            id=int(match.group(2)),
            name=normalize(match.group(3) or match.group(4) or ""),
            caption=normalize(_extract_object_caption(body)),
            object_kind=ObjectKind(match.group(1).lower()),
            extends_table=normalize(match.group(5) or match.group(6) or ""),
            fields=fields,
            keys=keys,
            file_path=file_path,
        )
        _mark_primary_key(table)
        return table


def _extract_object_caption(body: str) -> str:
    """Read the object's own Caption.

    Only the region before the fields block is searched, so a field's
    Caption is never picked up; without a fields block the search is
    limited to the first ``CAPTION_SEARCH_LIMIT`` characters.
    """
    fields_start = find_block_start(body, "fields")
    region = body[:fields_start] if fields_start >= 0 else body[:CAPTION_SEARCH_LIMIT]
    return extract_property(region, "Caption")


def _mark_primary_key(table: TableObject) -> None:
    primary = table.primary_key
    if primary is None:
        return
    key_names = {name.lower() for name in primary.fields}
    for field in table.fields:
        if field.name.lower() in key_names:
            field.is_primary_key = True
