"""Pattern catalog compilation (core domain).

Each supported locale contributes an ordered run of compiled patterns for
"reaction added" and "reaction removed" bodies. Order matters: tapback
patterns are narrower than the iOS generic pattern and must be tried first.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from core.models import ParsedReaction
from core.ports import StringsPort

LOGGER = logging.getLogger(__name__)

GOOGLE_MESSAGES = "google_messages"
IOS_GENERIC = "ios_generic"

# Tapback kind -> fixed emoji, in registration order.
TAPBACK_EMOJI: Tuple[Tuple[str, str], ...] = (
    ("loved", "❤️"),
    ("liked", "👍"),
    ("disliked", "👎"),
    ("laughed", "😂"),
    ("emphasized", "‼️"),
    ("questioned", "❓"),
)

STICKER_SUBJECT = "with a sticker"


class CatalogError(RuntimeError):
    """Raised when the baseline locale cannot be compiled."""


def string_key(kind: str, removal: bool) -> str:
    """Return the resource name for a pattern kind."""

    suffix = "removed" if removal else "added"
    if kind in (GOOGLE_MESSAGES, IOS_GENERIC):
        return f"emoji_reaction_{kind}_{suffix}"
    return f"emoji_reaction_ios_{kind}_{suffix}"


def pattern_kinds() -> List[str]:
    """Pattern kinds in catalog order for a single locale."""

    return [GOOGLE_MESSAGES, *(kind for kind, _ in TAPBACK_EMOJI), IOS_GENERIC]


STRING_KEYS: Tuple[str, ...] = tuple(
    string_key(kind, removal) for kind in pattern_kinds() for removal in (False, True)
)

_TAPBACK_LOOKUP = dict(TAPBACK_EMOJI)


@dataclass(frozen=True)
class ReactionPattern:
    """Compiled pattern tagged with the rule used to extract a reaction."""

    kind: str
    locale: str
    regex: re.Pattern
    is_removal: bool

    def extract(self, match: re.Match) -> Optional[ParsedReaction]:
        """Build a reaction from a regex match, or None to discard it."""

        emoji = _TAPBACK_LOOKUP.get(self.kind)
        if emoji is not None:
            return ParsedReaction(emoji, match.group(1), is_removal=self.is_removal)

        subject, text = match.group(1), match.group(2)
        # iOS reports stickers with the generic shape; they are not emoji.
        if self.kind == IOS_GENERIC and not self.is_removal and subject == STICKER_SUBJECT:
            return None
        return ParsedReaction(subject, text, is_removal=self.is_removal)


@dataclass(frozen=True)
class PatternCatalog:
    """Immutable ordered pattern lists shared by every parser."""

    locales: Tuple[str, ...]
    add_patterns: Tuple[ReactionPattern, ...]
    removal_patterns: Tuple[ReactionPattern, ...]


def _has_translations(provider: StringsPort, locale: str, baseline: str) -> bool:
    for key in STRING_KEYS:
        if provider.get_string(locale, key) != provider.get_string(baseline, key):
            return True
    return False


def discover_locales(
    provider: StringsPort,
    baseline: str = "en",
    candidates: Optional[Iterable[str]] = None,
) -> List[str]:
    """Return the locales with real translations, baseline first.

    A locale that only inherits baseline strings adds nothing but duplicate
    patterns, so it is left out.
    """

    supported: List[str] = [baseline]
    try:
        pool = list(candidates) if candidates is not None else list(provider.available_locales())
        for locale in pool:
            if locale in supported:
                continue
            try:
                if _has_translations(provider, locale, baseline):
                    supported.append(locale)
                    LOGGER.debug("Found emoji pattern translations for locale: %s", locale)
            except LookupError:
                LOGGER.debug("Locale %s has no emoji pattern strings, skipping", locale)
    except Exception:
        LOGGER.warning("Error discovering available locales, using defaults", exc_info=True)
        supported = [baseline]

    LOGGER.info("Using emoji pattern locales: %s", supported)
    return supported


def _compile(provider: StringsPort, locale: str, kind: str, removal: bool) -> ReactionPattern:
    # Quoted messages may span several lines.
    regex = re.compile(provider.get_string(locale, string_key(kind, removal)), re.DOTALL)
    return ReactionPattern(kind, locale, regex, removal)


def _compile_locale(
    provider: StringsPort, locale: str
) -> Tuple[List[ReactionPattern], List[ReactionPattern]]:
    added: List[ReactionPattern] = []
    removed: List[ReactionPattern] = []
    for kind in pattern_kinds():
        added.append(_compile(provider, locale, kind, False))
        removed.append(_compile(provider, locale, kind, True))
    return added, removed


def build_catalog(
    locales: Sequence[str],
    provider: StringsPort,
    baseline: Optional[str] = None,
) -> PatternCatalog:
    """Compile every locale's patterns into one ordered catalog.

    Translated locales that fail to compile are skipped. The baseline (the
    first locale unless given) must compile, otherwise CatalogError is raised.
    """

    if baseline is None and locales:
        baseline = locales[0]

    add_patterns: List[ReactionPattern] = []
    removal_patterns: List[ReactionPattern] = []
    loaded: List[str] = []
    for locale in locales:
        try:
            added, removed = _compile_locale(provider, locale)
        except (LookupError, re.error):
            LOGGER.warning("Failed to load patterns for locale: %s", locale, exc_info=True)
            continue
        add_patterns.extend(added)
        removal_patterns.extend(removed)
        loaded.append(locale)

    if not loaded or (baseline is not None and baseline not in loaded):
        LOGGER.error("Baseline locale %s has no usable emoji patterns (loaded: %s)", baseline, loaded)
        raise CatalogError(f"Baseline locale {baseline!r} patterns could not be loaded")

    return PatternCatalog(
        locales=tuple(loaded),
        add_patterns=tuple(add_patterns),
        removal_patterns=tuple(removal_patterns),
    )
