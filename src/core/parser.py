"""Reaction parsing against a compiled pattern catalog."""

from __future__ import annotations

from typing import Iterable, Optional

from core.models import ParsedReaction
from core.patterns import PatternCatalog, ReactionPattern


def _first_reaction(body: str, patterns: Iterable[ReactionPattern]) -> Optional[ParsedReaction]:
    for pattern in patterns:
        match = pattern.regex.search(body)
        if match is None:
            continue
        result = pattern.extract(match)
        if result is not None:
            return result
    return None


class ReactionParser:
    """Turn message bodies into parsed reactions.

    The parser holds no mutable state, so one instance can be shared by any
    number of callers.
    """

    def __init__(self, catalog: PatternCatalog) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> PatternCatalog:
        return self._catalog

    def parse(self, body: str) -> Optional[ParsedReaction]:
        """Return the reaction encoded in body, or None.

        Removals are checked before additions because several removal forms
        would otherwise also satisfy a generic "added" pattern.
        """

        if not body:
            return None
        removal = _first_reaction(body, self._catalog.removal_patterns)
        if removal is not None:
            return removal
        return _first_reaction(body, self._catalog.add_patterns)
