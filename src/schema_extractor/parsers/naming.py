"""Publisher-prefix normalization for object and field names."""
from __future__ import annotations

import re


class PrefixNormalizer:
    """Strips a configured namespace prefix from identifiers.

    AL projects often prefix every object and field with a publisher
    affix (``"ABC Loyalty Card"``).  When a prefix is configured, any name
    starting with it exactly has it removed; other names pass through.
    Without a prefix the normalizer is the identity function.
    """

    _QUOTED_NAME = re.compile(r'"([^"]+)"')

    def __init__(self, prefix: str | None = None) -> None:
        self._prefix = prefix or ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def __call__(self, name: str) -> str:
        if not self._prefix or not name:
            return name
        if name.startswith(self._prefix):
            return name[len(self._prefix):]
        return name

    def normalize_quoted(self, text: str) -> str:
        """Normalize every double-quoted name embedded in *text*."""
        if not self._prefix:
            return text
        return self._QUOTED_NAME.sub(lambda m: f'"{self(m.group(1))}"', text)

    def __repr__(self) -> str:
        return f"PrefixNormalizer(prefix={self._prefix!r})"
