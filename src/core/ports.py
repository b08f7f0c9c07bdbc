"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for message storage, localized strings,
and diagnostics so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Iterable, List, Protocol

from core.events import ReactionEvent
from core.models import Message, ReactionRecord


class StringsPort(Protocol):
    """Localized pattern strings keyed by locale tag and resource name."""

    def available_locales(self) -> Iterable[str]:
        ...

    def get_string(self, locale: str, key: str) -> str:
        """Return the template for key, raising LookupError when missing."""
        ...


class MessageStorePort(Protocol):
    """Message and reaction operations required by the core pipeline."""

    def messages_in_thread(self, thread_id: int, newest_first: bool = True) -> List[Message]:
        ...

    def messages_with_text(self) -> List[Message]:
        """Return SMS and MMS messages with non-empty text, oldest first."""
        ...

    def set_emoji_reaction(self, message: Message, value: bool) -> None:
        ...

    def clear_emoji_reaction_flags(self) -> None:
        ...

    def new_reaction_id(self) -> int:
        ...

    def insert_reaction(self, record: ReactionRecord) -> None:
        ...

    def attach_reaction(self, target: Message, record: ReactionRecord) -> None:
        ...

    def reactions_for(self, target: Message) -> List[ReactionRecord]:
        ...

    def delete_reaction(self, record: ReactionRecord) -> None:
        ...

    def delete_all_reactions(self) -> None:
        ...


class ObserverPort(Protocol):
    """Receives structured diagnostics from the core."""

    def emit(self, event: ReactionEvent) -> None:
        ...
