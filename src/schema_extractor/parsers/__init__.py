"""Tolerant, brace-aware parsers for AL table declarations."""

from src.schema_extractor.parsers.blocks import extract_block, extract_property
from src.schema_extractor.parsers.field_parser import parse_fields
from src.schema_extractor.parsers.key_parser import parse_keys
from src.schema_extractor.parsers.naming import PrefixNormalizer
from src.schema_extractor.parsers.relations import RelationTarget, resolve_relation
from src.schema_extractor.parsers.table_parser import TableParser

__all__ = [
    "extract_block",
    "extract_property",
    "parse_fields",
    "parse_keys",
    "PrefixNormalizer",
    "RelationTarget",
    "resolve_relation",
    "TableParser",
]
