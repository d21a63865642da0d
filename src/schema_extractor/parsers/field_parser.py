"""Field declaration parsing for table and table extension bodies."""
from __future__ import annotations

import logging
import re

from src.schema_extractor.parsers.blocks import (
    OPEN_BRACE,
    extract_block,
    extract_property,
    find_block,
)
from src.schema_extractor.parsers.naming import PrefixNormalizer
from src.schema_extractor.parsers.relations import extract_relation_expression
from src.shared.models.schema import FieldClass, TableField

logger = logging.getLogger(__name__)

# field(<id>; "<name>" | <name>; <type>)
_FIELD_RE = re.compile(
    r'\bfield\s*\(\s*(\d+)\s*;\s*(?:"([^"]+)"|([^;]+))\s*;\s*([^)]+)\)',
    re.IGNORECASE,
)


def parse_fields(
    body: str,
    normalize: PrefixNormalizer | None = None,
) -> list[TableField]:
    """Parse the ``fields { ... }`` block of an object body.

    FlowFields and FlowFilters are computed, have no storage, and are
    dropped.  Returns an empty list when the body has no fields block.

    Args:
        body: Text between the braces of a table or table extension.
        normalize: Prefix normalizer applied to names and captions.

    Returns:
        Fields in declaration order.
    """
    normalize = normalize or PrefixNormalizer()
    fields_body = find_block(body, "fields")
    if fields_body is None:
        return []

    fields: list[TableField] = []
    pos = 0
    while True:
        match = _FIELD_RE.search(fields_body, pos)
        if match is None:
            break

        field_body, pos = _read_property_block(fields_body, match.end())

        field_class = FieldClass.parse(extract_property(field_body, "FieldClass"))
        name = normalize((match.group(2) or match.group(3) or "").strip())
        if field_class.is_computed:
            logger.debug("Skipping computed field %s (%s)", name, field_class.value)
            continue

        caption = normalize(extract_property(field_body, "Caption"))
        fields.append(
            TableField(
                id=int(match.group(1)),
                name=name,
                type=match.group(4).strip(),
                caption=caption or name,
                field_class=field_class,
                table_relation=extract_relation_expression(field_body, normalize),
            )
        )

    return fields


def _read_property_block(text: str, start: int) -> tuple[str, int]:
    """Read the ``{ ... }`` property block following a declaration.

    Returns the block body (empty when the declaration is not followed
    by an opening brace) and the position to resume scanning from.
    """
    i = start
    while i < len(text) and text[i].isspace():
        i += 1
    if i >= len(text) or text[i] != OPEN_BRACE:
        return "", start
    block = extract_block(text, i + 1)
    return block, i + 1 + len(block) + 1
