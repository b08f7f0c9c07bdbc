"""Full rebuild of reaction state from message history.

The rebuild enforces a strict order:
1) Delete every reaction record
2) Reset the reaction flag on every message
3) Select every SMS/MMS message with text, oldest first
4) Parse, resolve, and apply each one in that order

Oldest-first is required: an add must exist before a later removal can
cancel it, and targets always precede the reactions that quote them.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Optional

from core.events import EventCollector, ReactionEvent
from core.parser import ReactionParser
from core.ports import MessageStorePort, ObserverPort
from core.processor import ReactionProcessor

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileSummary:
    """Counts reported by one full rebuild."""

    messages_scanned: int
    reactions_added: int
    reactions_removed: int
    orphaned: int
    elapsed_ms: int


class _Tee:
    """Forward each event to two observers."""

    def __init__(self, first: ObserverPort, second: Optional[ObserverPort]) -> None:
        self._first = first
        self._second = second

    def emit(self, event: ReactionEvent) -> None:
        self._first.emit(event)
        if self._second is not None:
            self._second.emit(event)


class BulkReconciler:
    """Wipe and rebuild every reaction record from message history.

    Must run exclusively: no other writer may touch the store meanwhile.
    """

    def __init__(
        self,
        parser: ReactionParser,
        store: MessageStorePort,
        observer: Optional[ObserverPort] = None,
    ) -> None:
        self._parser = parser
        self._store = store
        self._observer = observer

    def reconcile_all(self) -> ReconcileSummary:
        started = time.monotonic()

        self._store.delete_all_reactions()
        self._store.clear_emoji_reaction_flags()

        collector = EventCollector()
        processor = ReactionProcessor(self._parser, self._store, _Tee(collector, self._observer))

        messages = self._store.messages_with_text()
        # Stores are asked for ascending order; re-sorting keeps the contract
        # even for stores that cannot sort. The sort is stable for equal dates.
        messages = sorted(messages, key=lambda message: message.date)
        for message in messages:
            processor.handle(message)

        names = collector.names()
        summary = ReconcileSummary(
            messages_scanned=len(messages),
            reactions_added=names.count("reaction_saved") + names.count("orphaned_reaction"),
            reactions_removed=names.count("reaction_removed"),
            orphaned=names.count("orphaned_reaction"),
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        LOGGER.info(
            "Deleted and reparsed all emoji reactions: messages=%s, added=%s, removed=%s, orphaned=%s in %sms",
            summary.messages_scanned,
            summary.reactions_added,
            summary.reactions_removed,
            summary.orphaned,
            summary.elapsed_ms,
        )
        return summary
