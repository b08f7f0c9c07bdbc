"""Core reaction processing pipeline.

This module is storage-agnostic. It only relies on ports for messages and
diagnostics, enabling other stores or frontends without changes here.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.events import NullObserver
from core.models import Message, ParsedReaction
from core.parser import ReactionParser
from core.ports import MessageStorePort, ObserverPort
from core.reaction_store import ReactionStore
from core.resolver import find_target

LOGGER = logging.getLogger(__name__)


class ReactionProcessor:
    """Orchestrates parsing, target resolution, and reaction persistence."""

    def __init__(
        self,
        parser: ReactionParser,
        store: MessageStorePort,
        observer: Optional[ObserverPort] = None,
    ) -> None:
        self._parser = parser
        self._store = store
        self._observer = observer or NullObserver()
        self._reactions = ReactionStore(store, self._observer)

    def handle(self, message: Message) -> Optional[ParsedReaction]:
        """Process one message and return the reaction it carried, if any."""

        # Attachments without text can never carry a reaction.
        text = message.get_text()
        if not text.strip():
            return None

        reaction = self._parser.parse(text)
        if reaction is None:
            return None

        LOGGER.debug("Reaction found in message %s with %s", message.id, reaction.emoji)
        target = find_target(
            message.thread_id,
            reaction.original_message_text,
            self._store,
            self._observer,
        )
        self._reactions.apply(message, reaction, target)
        return reaction
