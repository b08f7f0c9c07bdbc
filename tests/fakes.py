from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from core.models import SMS, Message, ReactionRecord

BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_message(
    message_id: int,
    text: str,
    *,
    thread_id: int = 1,
    address: str = "+15550001111",
    minutes: Optional[int] = None,
    kind: str = SMS,
) -> Message:
    date = BASE_DATE + timedelta(minutes=message_id if minutes is None else minutes)
    if kind == SMS:
        return Message(id=message_id, thread_id=thread_id, address=address, date=date, body=text)
    return Message(
        id=message_id,
        thread_id=thread_id,
        address=address,
        date=date,
        kind=kind,
        parts=[text],
    )


class FakeStore:
    def __init__(self, messages: Iterable[Message] = ()) -> None:
        self.messages: Dict[int, Message] = {message.id: message for message in messages}
        self.reactions: Dict[int, ReactionRecord] = {}
        self.targets: Dict[int, int] = {}
        self._last_id = 0

    def messages_in_thread(self, thread_id: int, newest_first: bool = True) -> List[Message]:
        thread = [message for message in self.messages.values() if message.thread_id == thread_id]
        return sorted(thread, key=lambda message: (message.date, message.id), reverse=newest_first)

    def messages_with_text(self) -> List[Message]:
        with_text = [message for message in self.messages.values() if message.get_text()]
        return sorted(with_text, key=lambda message: (message.date, message.id))

    def set_emoji_reaction(self, message: Message, value: bool) -> None:
        message.is_emoji_reaction = value

    def clear_emoji_reaction_flags(self) -> None:
        for message in self.messages.values():
            message.is_emoji_reaction = False

    def new_reaction_id(self) -> int:
        self._last_id += 1
        return self._last_id

    def insert_reaction(self, record: ReactionRecord) -> None:
        self.reactions[record.id] = record

    def attach_reaction(self, target: Message, record: ReactionRecord) -> None:
        self.targets[record.id] = target.id

    def reactions_for(self, target: Message) -> List[ReactionRecord]:
        return [record for record in self.reactions.values() if self.targets.get(record.id) == target.id]

    def delete_reaction(self, record: ReactionRecord) -> None:
        self.reactions.pop(record.id, None)
        self.targets.pop(record.id, None)

    def delete_all_reactions(self) -> None:
        self.reactions.clear()
        self.targets.clear()

    def triples(self) -> List[tuple]:
        return sorted(
            (record.sender_address, record.emoji, self.targets.get(record.id))
            for record in self.reactions.values()
        )


class FakeStrings:
    """In-memory strings provider with baseline inheritance."""

    def __init__(self, tables: Dict[str, Dict[str, str]], baseline: str = "en") -> None:
        self._tables = tables
        self._baseline = baseline

    def available_locales(self) -> List[str]:
        return list(self._tables)

    def get_string(self, locale: str, key: str) -> str:
        if locale not in self._tables:
            raise LookupError(locale)
        table = self._tables[locale]
        if key in table:
            return table[key]
        if locale != self._baseline:
            return self.get_string(self._baseline, key)
        raise LookupError(key)
