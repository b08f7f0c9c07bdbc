"""JSON-file localized strings adapter.

Implements the core StringsPort from one ``<locale>.json`` file per locale.
A locale file only needs the keys it translates; anything else is inherited
from the baseline locale, the same way platform resource lookup behaves.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, List

LOGGER = logging.getLogger(__name__)

DEFAULT_DIRECTORY = os.path.join(os.path.dirname(__file__), "locales")


class StringNotFoundError(LookupError):
    """Raised when a locale or one of its strings cannot be found."""


class JsonLocaleStrings:
    """Read pattern templates from a directory of JSON files."""

    def __init__(self, directory: str = DEFAULT_DIRECTORY, baseline: str = "en") -> None:
        self._directory = directory
        self._baseline = baseline
        self._cache: Dict[str, Dict[str, str]] = {}

    def available_locales(self) -> List[str]:
        """Return every locale with a strings file, baseline first."""

        if not os.path.isdir(self._directory):
            raise FileNotFoundError(f"Locale directory not found: {self._directory}")
        locales = sorted(
            name[: -len(".json")]
            for name in os.listdir(self._directory)
            if name.endswith(".json")
        )
        if self._baseline in locales:
            locales.remove(self._baseline)
            locales.insert(0, self._baseline)
        return locales

    def _load(self, locale: str) -> Dict[str, str]:
        if locale in self._cache:
            return self._cache[locale]

        path = os.path.join(self._directory, f"{locale}.json")
        if not os.path.exists(path):
            raise StringNotFoundError(f"No strings file for locale {locale!r}")
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise StringNotFoundError(f"Strings file for locale {locale!r} is not an object")

        table = {str(key): str(value) for key, value in data.items()}
        self._cache[locale] = table
        LOGGER.debug("Loaded %s strings for locale %s", len(table), locale)
        return table

    def get_string(self, locale: str, key: str) -> str:
        table = self._load(locale)
        if key in table:
            return table[key]
        if locale != self._baseline:
            return self.get_string(self._baseline, key)
        raise StringNotFoundError(f"Missing string {key!r} for locale {locale!r}")
