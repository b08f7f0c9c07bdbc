"""SQLite storage adapter.

Implements the core MessageStorePort using a simple SQLite database.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import sqlite3
from typing import Iterator, List, Optional

from core.models import MMS, SMS, Message, ReactionRecord


def _to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _from_millis(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _record_from_row(row: sqlite3.Row) -> ReactionRecord:
    return ReactionRecord(
        id=int(row["id"]),
        reaction_message_id=int(row["reaction_message_id"]),
        sender_address=row["sender_address"],
        emoji=row["emoji"],
        original_message_text=row["original_message_text"],
        thread_id=int(row["thread_id"]),
    )


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the MessageStorePort contract.

    Outside of ``transaction()`` every call opens and commits its own
    connection. Inside it, all calls share one connection that is committed
    once at the end or rolled back on error.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._active: Optional[sqlite3.Connection] = None

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if self._active is not None:
            yield self._active
            return
        conn = self._open()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator["SQLiteStorage"]:
        """Run every store call in the block as one atomic unit."""

        if self._active is not None:
            yield self
            return
        conn = self._open()
        self._active = conn
        try:
            with conn:
                yield self
        finally:
            self._active = None
            conn.close()

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - messages: SMS and MMS headers, with the reaction-carrier flag
        - message_parts: MMS text parts in display order
        - emoji_reactions: derived reaction records
        - key_sequence: monotonically increasing id allocator
        """

        with self._connect() as conn:
            # Fields:
            # - date: epoch milliseconds, the ordering key for reconciliation
            # - type: "sms" or "mms"
            # - body: SMS text; MMS text lives in message_parts
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY,
                    thread_id INTEGER NOT NULL,
                    address TEXT NOT NULL,
                    date INTEGER NOT NULL,
                    type TEXT NOT NULL DEFAULT 'sms',
                    body TEXT,
                    is_emoji_reaction INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_messages_thread_date ON messages (thread_id, date)"
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS message_parts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    message_id INTEGER NOT NULL,
                    seq INTEGER NOT NULL,
                    text TEXT
                )
                """
            )
            # target_message_id is NULL for orphaned reactions whose quoted
            # message could not be found.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS emoji_reactions (
                    id INTEGER PRIMARY KEY,
                    reaction_message_id INTEGER NOT NULL,
                    sender_address TEXT NOT NULL,
                    emoji TEXT NOT NULL,
                    original_message_text TEXT NOT NULL,
                    thread_id INTEGER NOT NULL,
                    target_message_id INTEGER
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS key_sequence (
                    name TEXT PRIMARY KEY,
                    value INTEGER NOT NULL
                )
                """
            )

    def add_message(self, message: Message) -> None:
        """Insert or replace a message and its text parts."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO messages (id, thread_id, address, date, type, body, is_emoji_reaction)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    message.id,
                    message.thread_id,
                    message.address,
                    _to_millis(message.date),
                    message.kind,
                    message.body,
                    int(message.is_emoji_reaction),
                ),
            )
            conn.execute("DELETE FROM message_parts WHERE message_id = ?", (message.id,))
            conn.executemany(
                "INSERT INTO message_parts (message_id, seq, text) VALUES (?, ?, ?)",
                [(message.id, seq, text) for seq, text in enumerate(message.parts)],
            )

    def _hydrate(self, conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[Message]:
        messages: List[Message] = []
        for row in rows:
            parts: List[str] = []
            if row["type"] == MMS:
                parts = [
                    part["text"] or ""
                    for part in conn.execute(
                        "SELECT text FROM message_parts WHERE message_id = ? ORDER BY seq",
                        (row["id"],),
                    ).fetchall()
                ]
            messages.append(
                Message(
                    id=int(row["id"]),
                    thread_id=int(row["thread_id"]),
                    address=row["address"],
                    date=_from_millis(int(row["date"])),
                    kind=row["type"],
                    body=row["body"] or "",
                    parts=parts,
                    is_emoji_reaction=bool(row["is_emoji_reaction"]),
                )
            )
        return messages

    def get_message(self, message_id: int) -> Optional[Message]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM messages WHERE id = ?", (message_id,)).fetchall()
            messages = self._hydrate(conn, rows)
        return messages[0] if messages else None

    def messages_in_thread(self, thread_id: int, newest_first: bool = True) -> List[Message]:
        order = "DESC" if newest_first else "ASC"
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM messages WHERE thread_id = ? ORDER BY date {order}, id {order}",
                (thread_id,),
            ).fetchall()
            return self._hydrate(conn, rows)

    def messages_with_text(self) -> List[Message]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM messages m
                WHERE (m.type = ? AND m.body IS NOT NULL AND m.body != '')
                   OR (m.type = ? AND EXISTS (
                        SELECT 1 FROM message_parts p
                        WHERE p.message_id = m.id AND p.text IS NOT NULL AND p.text != ''
                   ))
                ORDER BY m.date ASC, m.id ASC
                """,
                (SMS, MMS),
            ).fetchall()
            return self._hydrate(conn, rows)

    def set_emoji_reaction(self, message: Message, value: bool) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE messages SET is_emoji_reaction = ? WHERE id = ?",
                (int(value), message.id),
            )
        message.is_emoji_reaction = value

    def clear_emoji_reaction_flags(self) -> None:
        with self._connect() as conn:
            conn.execute("UPDATE messages SET is_emoji_reaction = 0")

    def new_reaction_id(self) -> int:
        """Allocate an id that is never handed out twice, even after deletes."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO key_sequence (name, value) VALUES ('emoji_reactions', 1)
                ON CONFLICT(name) DO UPDATE SET value = value + 1
                """
            )
            row = conn.execute(
                "SELECT value FROM key_sequence WHERE name = 'emoji_reactions'"
            ).fetchone()
        return int(row["value"])

    def insert_reaction(self, record: ReactionRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO emoji_reactions (
                    id,
                    reaction_message_id,
                    sender_address,
                    emoji,
                    original_message_text,
                    thread_id
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.reaction_message_id,
                    record.sender_address,
                    record.emoji,
                    record.original_message_text,
                    record.thread_id,
                ),
            )

    def attach_reaction(self, target: Message, record: ReactionRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE emoji_reactions SET target_message_id = ? WHERE id = ?",
                (target.id, record.id),
            )

    def reactions_for(self, target: Message) -> List[ReactionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM emoji_reactions WHERE target_message_id = ? ORDER BY id",
                (target.id,),
            ).fetchall()
        return [_record_from_row(row) for row in rows]

    def delete_reaction(self, record: ReactionRecord) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM emoji_reactions WHERE id = ?", (record.id,))

    def delete_all_reactions(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM emoji_reactions")

    def list_reactions(self) -> List[dict]:
        """Return every reaction record with its target id, for export."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, reaction_message_id, sender_address, emoji,
                       original_message_text, thread_id, target_message_id
                FROM emoji_reactions
                ORDER BY id
                """
            ).fetchall()
        return [dict(row) for row in rows]
