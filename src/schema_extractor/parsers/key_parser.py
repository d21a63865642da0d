"""Key declaration parsing.

AL has no explicit primary-key marker: the first key declared in the
``keys`` block is the primary key.
"""
from __future__ import annotations

import re

from src.schema_extractor.parsers.blocks import find_block
from src.schema_extractor.parsers.naming import PrefixNormalizer
from src.shared.models.schema import TableKey

# key(<name>; <field>, <field>, ...)
_KEY_RE = re.compile(
    r'\bkey\s*\(\s*(?:"([^"]+)"|([^;]+))\s*;\s*([^)]+)\)',
    re.IGNORECASE,
)
# A quoted element keeps its commas; bare elements end at the next comma
_KEY_FIELD_RE = re.compile(r'\s*(?:"([^"]+)"|([^,]+))')


def split_key_fields(raw: str) -> list[str]:
    """Split a key's field list into trimmed, unquoted names."""
    names: list[str] = []
    for match in _KEY_FIELD_RE.finditer(raw):
        value = (match.group(1) or match.group(2) or "").strip()
        if value:
            names.append(value)
    return names


def parse_keys(
    body: str,
    normalize: PrefixNormalizer | None = None,
) -> list[TableKey]:
    """Parse the ``keys { ... }`` block of an object body.

    Only the first key matched in document order is flagged primary.
    Returns an empty list when the body has no keys block.
    """
    normalize = normalize or PrefixNormalizer()
    keys_body = find_block(body, "keys")
    if keys_body is None:
        return []

    keys: list[TableKey] = []
    for match in _KEY_RE.finditer(keys_body):
        name = (match.group(1) or match.group(2) or "").strip().strip('"')
        keys.append(
            TableKey(
                name=normalize(name),
                fields=[normalize(f) for f in split_key_fields(match.group(3))],
                is_primary_key=not keys,
            )
        )
    return keys
