"""Best-effort merchant extraction.

Patterns are tried in order and every match of a pattern is considered
before moving on; the first candidate at least two characters long and not
purely numeric wins. Merchant is optional downstream, so a miss is ``None``.
"""

from __future__ import annotations

import re

from .patterns import PatternTables, default_tables

_NUMERIC_RE = re.compile(r"^[\d\s.,\-]+$")
_STRIP_CHARS = " \t-.,&'"


def clean_merchant(raw: str, *, max_length: int = 50) -> str | None:
    """Trim a captured merchant and apply the acceptance rules."""

    name = " ".join(raw.split()).strip(_STRIP_CHARS)
    name = name[:max_length].rstrip(_STRIP_CHARS)
    if len(name) < 2 or _NUMERIC_RE.match(name):
        return None
    return name


class MerchantExtractor:
    def __init__(self, tables: PatternTables | None = None, *, max_length: int = 50) -> None:
        self._patterns = (tables or default_tables()).merchant_patterns
        self._max_length = max_length

    def extract(self, text: str) -> str | None:
        for pattern in self._patterns:
            for match in pattern.finditer(text):
                found = clean_merchant(match.group("merchant"), max_length=self._max_length)
                if found is not None:
                    return found
        return None


__all__ = ["MerchantExtractor", "clean_merchant"]
