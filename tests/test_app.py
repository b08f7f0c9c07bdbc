from __future__ import annotations

import logging

import app


def test_parse_command_prints_reaction(capsys) -> None:
    exit_code = app.main(["parse", 'Liked "Dinner at 8?"'])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "👍" in out
    assert "Dinner at 8?" in out


def test_parse_command_rejects_plain_text(capsys) -> None:
    assert app.main(["parse", "See you at 8"]) == 1
    assert "Not a reaction" in capsys.readouterr().out


def test_redacting_formatter_masks_addresses() -> None:
    formatter = app._RedactingFormatter(["s3cret"], fmt="%(message)s", redact_addresses=True)
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "from +1 555-000-1111 key s3cret", None, None)

    assert formatter.format(record) == "from *** key ***"
