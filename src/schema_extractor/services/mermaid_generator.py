"""Mermaid ``erDiagram`` rendering of the presentation graph."""
from __future__ import annotations

import re

from src.shared.models.schema import DiagramData, DiagramField

# AL scalar types that keep their own (lowercased) label in Mermaid
_SCALAR_TYPES: frozenset[str] = frozenset({
    "decimal", "boolean", "date", "time", "datetime", "guid", "blob",
    "media", "mediaset", "recordid", "option", "duration", "dateformula",
})

_PREFIX_TYPES: tuple[tuple[str, str], ...] = (
    ("code", "string"),
    ("text", "string"),
    ("enum", "enum"),
)

_STRIP_CHARS_RE = re.compile(r"[/\"']")
_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_CHARS_RE = re.compile(r"[^A-Za-z0-9_]")
_UNDERSCORE_RUN_RE = re.compile(r"_+")


def sanitize_name(name: str) -> str:
    """Reduce *name* to a Mermaid identifier (``[A-Za-z0-9_]``)."""
    value = _STRIP_CHARS_RE.sub("", name)
    value = _WHITESPACE_RE.sub("_", value)
    value = _INVALID_CHARS_RE.sub("_", value)
    value = _UNDERSCORE_RUN_RE.sub("_", value)
    return value.strip("_")


def map_type(al_type: str) -> str:
    """Map an AL type expression to a short Mermaid type label."""
    lowered = al_type.strip().lower()
    for prefix, label in _PREFIX_TYPES:
        if lowered.startswith(prefix):
            return label
    if lowered == "integer":
        return "int"
    if lowered == "biginteger":
        return "bigint"
    if lowered in _SCALAR_TYPES:
        return lowered
    return "string"


def _constraints(field: DiagramField) -> str:
    markers = []
    if field.is_primary_key:
        markers.append("PK")
    if field.is_foreign_key:
        markers.append("FK")
    return " " + ",".join(markers) if markers else ""


def generate_mermaid_erd(diagram: DiagramData) -> str:
    """Render *diagram* as Mermaid ER source.

    Relations are drawn many-to-one (``}o--||``) from the referencing
    entity, labelled with the foreign-key field.
    """
    lines = ["erDiagram"]

    for entity in diagram.entities:
        lines.append(f"    {sanitize_name(entity.name)} {{")
        for field in entity.fields:
            comment = ""
            if field.caption and field.caption != field.name:
                caption = field.caption.replace('"', "'")
                comment = f' "{caption}"'
            lines.append(
                f"        {map_type(field.type)} {sanitize_name(field.name)}"
                f"{_constraints(field)}{comment}"
            )
        lines.append("    }")

    for rel in diagram.relations:
        lines.append(
            f"    {sanitize_name(rel.source_entity)} }}o--|| "
            f'{sanitize_name(rel.target_entity)} : "{sanitize_name(rel.source_field)}"'
        )

    return "\n".join(lines)
