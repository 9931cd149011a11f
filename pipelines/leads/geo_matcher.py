"""Geography relevance filter."""

from __future__ import annotations

from collections.abc import Sequence


def match_keywords(text: str, keywords: Sequence[str]) -> tuple[str, ...]:
    """Return every keyword contained in text (case-insensitive), in keyword order."""
    haystack = (text or "").lower()
    if not haystack:
        return ()
    return tuple(keyword for keyword in keywords if keyword and keyword.lower() in haystack)


class GeoMatcher:
    """Any single configured geography hit marks a record as relevant."""

    def __init__(self, keywords: Sequence[str]) -> None:
        self._keywords = tuple(keywords)

    def match(self, text: str) -> tuple[str, ...]:
        return match_keywords(text, self._keywords)
