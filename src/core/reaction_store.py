"""Apply parsed reactions to the message store."""

from __future__ import annotations

import logging
from typing import Optional

from core.events import NullObserver, ReactionEvent
from core.models import Message, ParsedReaction, ReactionRecord
from core.ports import MessageStorePort, ObserverPort


class ReactionStore:
    """Create or delete reaction records for carrier messages."""

    def __init__(self, store: MessageStorePort, observer: Optional[ObserverPort] = None) -> None:
        self._store = store
        self._observer = observer or NullObserver()

    def apply(self, carrier: Message, reaction: ParsedReaction, target: Optional[Message]) -> None:
        """Record reaction carried by carrier against target.

        The carrier is always flagged as a reaction, even when the target
        cannot be found, so it never renders as a normal text message.
        Adds are not deduplicated: applying the same add twice stores two
        records.
        """

        if reaction.is_removal:
            self._remove(carrier, reaction, target)
            return

        record = ReactionRecord(
            id=self._store.new_reaction_id(),
            reaction_message_id=carrier.id,
            sender_address=carrier.address,
            emoji=reaction.emoji,
            original_message_text=reaction.original_message_text,
            thread_id=carrier.thread_id,
        )
        self._store.insert_reaction(record)
        self._store.set_emoji_reaction(carrier, True)

        if target is not None:
            self._store.attach_reaction(target, record)
            self._emit("reaction_saved", logging.INFO, carrier, reaction, target)
        else:
            self._emit("orphaned_reaction", logging.WARNING, carrier, reaction, None)

    def _remove(self, carrier: Message, reaction: ParsedReaction, target: Optional[Message]) -> None:
        if target is None:
            self._emit("removal_without_target", logging.WARNING, carrier, reaction, None)
            self._store.set_emoji_reaction(carrier, True)
            return

        existing = next(
            (
                candidate
                for candidate in self._store.reactions_for(target)
                if candidate.sender_address == carrier.address and candidate.emoji == reaction.emoji
            ),
            None,
        )
        if existing is not None:
            self._store.delete_reaction(existing)
            self._emit("reaction_removed", logging.DEBUG, carrier, reaction, target)
        else:
            self._emit("removal_not_found", logging.WARNING, carrier, reaction, target)

        self._store.set_emoji_reaction(carrier, True)

    def _emit(
        self,
        name: str,
        level: int,
        carrier: Message,
        reaction: ParsedReaction,
        target: Optional[Message],
    ) -> None:
        self._observer.emit(
            ReactionEvent(
                name,
                level=level,
                message_id=carrier.id,
                emoji=reaction.emoji,
                target_id=target.id if target is not None else None,
            )
        )
