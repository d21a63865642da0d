"""Brace-aware scanning primitives for AL source text.

Every higher-level extractor builds on :func:`extract_block`, which
recovers the text between an opening ``{`` (already consumed by the
caller) and its matching ``}``.  Scanning is tolerant: quoted strings
and ``//`` line comments are skipped, and unbalanced input never raises,
it simply runs to the end of the text.
"""
from __future__ import annotations

import re
from enum import Enum

OPEN_BRACE = "{"
CLOSE_BRACE = "}"
QUOTE_CHARS = ("'", '"')
LINE_COMMENT = "//"


class _ScanState(Enum):
    NORMAL = "normal"
    IN_STRING = "in_string"


def extract_block(text: str, start: int) -> str:
    """Return the body of a brace block starting at *start*.

    *start* is the index just after an opening ``{``, so the nesting
    depth begins at 1.  The returned substring excludes the matching
    closing brace.  On unbalanced input everything from *start* to the
    end of *text* is returned.

    A doubled quote inside a string is read as "close then reopen",
    which keeps the string state correct without escape handling.
    """
    depth = 1
    state = _ScanState.NORMAL
    quote = ""
    i = start
    length = len(text)

    while i < length:
        ch = text[i]
        if state is _ScanState.IN_STRING:
            if ch == quote:
                state = _ScanState.NORMAL
        elif ch in QUOTE_CHARS:
            state = _ScanState.IN_STRING
            quote = ch
        elif ch == OPEN_BRACE:
            depth += 1
        elif ch == CLOSE_BRACE:
            depth -= 1
            if depth == 0:
                return text[start:i]
        elif text.startswith(LINE_COMMENT, i):
            eol = text.find("\n", i)
            # Land on the newline itself; the increment below steps past it
            i = length if eol == -1 else eol
            continue
        i += 1

    return text[start:]


def find_block(text: str, keyword: str) -> str | None:
    """Locate ``<keyword> {`` in *text* and return its balanced body.

    Returns ``None`` when the keyword block is absent.
    """
    match = re.search(rf"\b{re.escape(keyword)}\s*\{{", text, re.IGNORECASE)
    if match is None:
        return None
    return extract_block(text, match.end())


def find_block_start(text: str, keyword: str) -> int:
    """Return the index where ``<keyword> {`` begins, or -1."""
    match = re.search(rf"\b{re.escape(keyword)}\s*\{{", text, re.IGNORECASE)
    return match.start() if match else -1


def unescape_quoted(value: str) -> str:
    """Collapse doubled single quotes into one literal quote."""
    return value.replace("''", "'")


def strip_line_comments(text: str) -> str:
    """Remove ``//`` comments that start outside a quoted string."""
    out: list[str] = []
    quote = ""
    i = 0
    length = len(text)
    while i < length:
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in QUOTE_CHARS:
            quote = ch
        elif text.startswith(LINE_COMMENT, i):
            eol = text.find("\n", i)
            if eol == -1:
                break
            i = eol
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def extract_property(block: str, property_name: str) -> str:
    """Read a ``Name = value;`` property assignment from *block*.

    The quoted form ``Name = 'value'`` is tried first (``''`` inside the
    value unescapes to ``'``); the unquoted form reads up to the next
    ``;`` and is trimmed.  The property name matches case-insensitively.
    Returns an empty string when the property is absent.  Commented-out
    assignments are ignored.
    """
    block = strip_line_comments(block)
    name = re.escape(property_name)
    quoted = re.search(
        rf"\b{name}\s*=\s*'((?:[^']|'')*)'", block, re.IGNORECASE
    )
    if quoted:
        return unescape_quoted(quoted.group(1))

    unquoted = re.search(rf"\b{name}\s*=\s*([^;]+);", block, re.IGNORECASE)
    if unquoted:
        return unquoted.group(1).strip()

    return ""


def find_statement_end(text: str, start: int) -> int:
    """Return the index of the first ``;`` at or after *start* outside quotes.

    Returns ``len(text)`` when no terminator is found.
    """
    quote = ""
    for i in range(start, len(text)):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
        elif ch in QUOTE_CHARS:
            quote = ch
        elif ch == ";":
            return i
    return len(text)
