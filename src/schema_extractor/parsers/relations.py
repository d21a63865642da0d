"""TableRelation extraction and target resolution.

A raw relation expression looks like::

    "Customer"."No." WHERE ("Blocked" = CONST(false))

i.e. a quoted or bare entity name, an optional ``.field``, and an
optional ``WHERE``/``IF`` clause that runs to the end of the expression.
Only the leading target is resolved; conditional clauses are dropped.
"""
from __future__ import annotations

import re
from typing import NamedTuple

from src.schema_extractor.parsers.blocks import QUOTE_CHARS, find_statement_end
from src.schema_extractor.parsers.naming import PrefixNormalizer

_TABLE_RELATION_RE = re.compile(r"\bTableRelation\s*=\s*", re.IGNORECASE)
_CLAUSE_KEYWORD_RE = re.compile(r"\b(?:WHERE|IF)\b", re.IGNORECASE)
_QUOTED_NAME_RE = re.compile(r'^"([^"]+)"')
_BARE_NAME_RE = re.compile(r"^(\w+)")
_WHITESPACE_RE = re.compile(r"\s+")


class RelationTarget(NamedTuple):
    """Resolved target of a relation expression."""
    table: str
    field: str


def extract_relation_expression(
    field_body: str,
    normalize: PrefixNormalizer | None = None,
) -> str:
    """Return the ``TableRelation`` value of a field property block.

    Whitespace runs are collapsed to single spaces and quoted names are
    prefix-normalized.  Returns an empty string when the field declares
    no relation.
    """
    match = _TABLE_RELATION_RE.search(field_body)
    if match is None:
        return ""
    end = find_statement_end(field_body, match.end())
    expression = _WHITESPACE_RE.sub(" ", field_body[match.end():end]).strip()
    if normalize is not None:
        expression = normalize.normalize_quoted(expression)
    return expression


def strip_conditional_clause(expression: str) -> str:
    """Cut *expression* at the first ``WHERE``/``IF`` outside quotes."""
    quote = ""
    i = 0
    while i < len(expression):
        ch = expression[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in QUOTE_CHARS:
            quote = ch
        else:
            match = _CLAUSE_KEYWORD_RE.match(expression, i)
            if match and (i == 0 or not _is_word_char(expression[i - 1])):
                return expression[:i].strip()
        i += 1
    return expression.strip()


def resolve_relation(
    expression: str,
    normalize: PrefixNormalizer | None = None,
) -> RelationTarget:
    """Resolve the target entity and field named by a relation expression.

    Both names pass through *normalize*.  Empty input, or input that
    names no target, yields empty strings.
    """
    normalize = normalize or PrefixNormalizer()
    if not expression:
        return RelationTarget("", "")

    remaining = strip_conditional_clause(expression)

    name, remaining = _read_name(remaining)
    if not name:
        return RelationTarget("", "")

    field = ""
    remaining = remaining.strip()
    if remaining.startswith("."):
        field, _ = _read_name(remaining[1:].lstrip())

    return RelationTarget(normalize(name), normalize(field))


def _read_name(text: str) -> tuple[str, str]:
    """Read a leading quoted or bare name; return it and the rest of *text*."""
    quoted = _QUOTED_NAME_RE.match(text)
    if quoted:
        return quoted.group(1), text[quoted.end():]
    bare = _BARE_NAME_RE.match(text)
    if bare:
        return bare.group(1), text[bare.end():]
    return "", text


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"
