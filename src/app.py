"""Application entry point for the tapback reaction tools."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text

import settings
from adapters.locale_strings import DEFAULT_DIRECTORY, JsonLocaleStrings
from adapters.sqlite_storage import SQLiteStorage
from core.events import LoggingObserver
from core.parser import ReactionParser
from core.patterns import build_catalog, discover_locales
from core.processor import ReactionProcessor
from core.reconciler import BulkReconciler

NAME = "TAPBACK"
FONT = "tarty-1"

# Loose phone-number shape used to mask sender addresses in log output.
_ADDRESS_RE = re.compile(r"\+?\d[\d\-\s().]{5,}\d")

EXPORT_FIELDS = (
    "id",
    "reaction_message_id",
    "sender_address",
    "emoji",
    "original_message_text",
    "thread_id",
    "target_message_id",
)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(
        self,
        secrets: list[str],
        fmt: str,
        datefmt: Optional[str] = None,
        redact_addresses: bool = False,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]
        self._redact_addresses = redact_addresses

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        if self._redact_addresses:
            message = _ADDRESS_RE.sub("***", message)
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    redact_cfg = config.get("redact", {})
    formatter = _RedactingFormatter(
        secrets,
        fmt=fmt,
        datefmt=datefmt,
        redact_addresses=bool(redact_cfg.get("enabled", False) and redact_cfg.get("addresses", False)),
    )

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        # stderr keeps command output on stdout clean for piping.
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/tapback.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def build_reaction_parser() -> ReactionParser:
    """Discover locales and compile the shared pattern catalog once."""

    locale_config = settings.LOCALE_CONFIG
    provider = JsonLocaleStrings(settings.LOCALES_DIR or DEFAULT_DIRECTORY, locale_config.baseline)
    locales = discover_locales(provider, locale_config.baseline, locale_config.candidates)
    catalog = build_catalog(locales, provider, locale_config.baseline)
    logging.getLogger(__name__).info(
        "%s reaction patterns are loaded for %s locale(s)",
        len(catalog.add_patterns) + len(catalog.removal_patterns),
        len(catalog.locales),
    )
    return ReactionParser(catalog)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _parse(body: str, console: Console) -> int:
    reaction = build_reaction_parser().parse(body)
    if reaction is None:
        console.print("Not a reaction")
        return 1

    table = Table(show_header=False)
    table.add_column("field")
    table.add_column("value")
    table.add_row("emoji", Text(reaction.emoji))
    table.add_row("target", Text(reaction.original_message_text))
    table.add_row("removal", Text(str(reaction.is_removal).lower()))
    console.print(table)
    return 0


def _locales(console: Console) -> int:
    catalog = build_reaction_parser().catalog
    table = Table("locale", "add patterns", "removal patterns")
    for locale in catalog.locales:
        added = sum(1 for pattern in catalog.add_patterns if pattern.locale == locale)
        removed = sum(1 for pattern in catalog.removal_patterns if pattern.locale == locale)
        table.add_row(locale, str(added), str(removed))
    console.print(table)
    return 0


def _reconcile(console: Console) -> int:
    _print_banner()
    parser = build_reaction_parser()
    storage = _open_storage()
    # One transaction: a failed rebuild leaves the previous reactions intact.
    with storage.transaction():
        summary = BulkReconciler(parser, storage, LoggingObserver()).reconcile_all()
    console.print(
        f"Reconciled {summary.messages_scanned} messages: "
        f"{summary.reactions_added} added, {summary.reactions_removed} removed, "
        f"{summary.orphaned} without target"
    )
    return 0


def _ingest(message_id: int, console: Console) -> int:
    parser = build_reaction_parser()
    storage = _open_storage()
    with storage.transaction():
        message = storage.get_message(message_id)
        if message is None:
            console.print(f"Message {message_id} not found")
            return 2
        reaction = ReactionProcessor(parser, storage, LoggingObserver()).handle(message)
    if reaction is None:
        console.print(f"Message {message_id} is not a reaction")
        return 1
    action = "removed" if reaction.is_removal else "added"
    console.print(Text(f"Message {message_id} {action} {reaction.emoji} on {reaction.original_message_text!r}"))
    return 0


def _export(fmt: str, output: Optional[str]) -> int:
    rows = _open_storage().list_reactions()
    handle = open(output, "w", encoding="utf-8", newline="") if output else sys.stdout
    try:
        if fmt == "csv":
            writer = csv.DictWriter(handle, fieldnames=EXPORT_FIELDS)
            writer.writeheader()
            writer.writerows(rows)
        else:
            json.dump(rows, handle, ensure_ascii=False, indent=2)
            handle.write("\n")
    finally:
        if output:
            handle.close()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="tapback")
    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_cmd = subparsers.add_parser("parse", help="Parse one message body")
    parse_cmd.add_argument("body")
    subparsers.add_parser("locales", help="List locales with reaction patterns")
    subparsers.add_parser("reconcile", help="Delete and rebuild every reaction from history")
    ingest_cmd = subparsers.add_parser("ingest", help="Apply the reaction carried by one stored message")
    ingest_cmd.add_argument("message_id", type=int)
    export_cmd = subparsers.add_parser("export", help="Export reaction records")
    export_cmd.add_argument("--format", choices=("json", "csv"), default="json")
    export_cmd.add_argument("--output", "-o")

    args = parser.parse_args(argv)
    _configure_logging()
    console = Console()

    if args.command == "parse":
        return _parse(args.body, console)
    if args.command == "locales":
        return _locales(console)
    if args.command == "reconcile":
        return _reconcile(console)
    if args.command == "ingest":
        return _ingest(args.message_id, console)
    return _export(args.format, args.output)


if __name__ == "__main__":
    sys.exit(main())
