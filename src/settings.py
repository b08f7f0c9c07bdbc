"""Static configuration for tapback.

All user-editable settings (database, locales, logging) live in a single
JSON file for quick edits without touching Python.
"""

import json
import os

from core.config import LocaleConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json can be relocated with TAPBACK_CONFIG, mostly for tests and
# side-by-side databases.
CONFIG_PATH = os.getenv("TAPBACK_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
_database = _CONFIG.get("database", {})
DB_PATH = _resolve_path(_database.get("path", "tapback.db"))

# Locale discovery controls which translated pattern sets are compiled.
# - LOCALES_DIR: directory of <locale>.json strings files (None = bundled)
# - LOCALE_BASELINE: always-on locale other locales are compared against
# - LOCALE_CANDIDATES: explicit list, or empty to try every strings file
_locales = _CONFIG.get("locales", {})
_locales_dir = _locales.get("directory")
LOCALES_DIR = _resolve_path(_locales_dir) if _locales_dir else None
LOCALE_BASELINE = _locales.get("baseline", "en")
LOCALE_CANDIDATES = tuple(_locales.get("candidates", []) or [])

LOCALE_CONFIG = LocaleConfig(
    baseline=LOCALE_BASELINE,
    candidates=LOCALE_CANDIDATES or None,
)


# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
