from __future__ import annotations

import json

import pytest

from adapters.locale_strings import JsonLocaleStrings, StringNotFoundError


def _write(path, data) -> None:
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")


def test_missing_keys_inherit_baseline(tmp_path) -> None:
    _write(tmp_path / "en.json", {"greeting": "hello", "farewell": "bye"})
    _write(tmp_path / "de.json", {"greeting": "hallo"})
    strings = JsonLocaleStrings(str(tmp_path))

    assert strings.get_string("de", "greeting") == "hallo"
    assert strings.get_string("de", "farewell") == "bye"


def test_unknown_locale_and_key_raise_lookup_error(tmp_path) -> None:
    _write(tmp_path / "en.json", {"greeting": "hello"})
    strings = JsonLocaleStrings(str(tmp_path))

    with pytest.raises(StringNotFoundError):
        strings.get_string("pt", "greeting")
    with pytest.raises(LookupError):
        strings.get_string("en", "missing")


def test_available_locales_lists_baseline_first(tmp_path) -> None:
    for name in ("de", "en", "zz"):
        _write(tmp_path / f"{name}.json", {})
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    assert JsonLocaleStrings(str(tmp_path)).available_locales() == ["en", "de", "zz"]
