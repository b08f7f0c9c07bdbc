"""Structured diagnostics emitted by the core.

The core never logs directly from parsing or resolution code. It reports
events to an observer so callers decide where diagnostics go.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReactionEvent:
    """One diagnostic emitted while applying reactions."""

    name: str
    level: int = logging.DEBUG
    message_id: Optional[int] = None
    emoji: Optional[str] = None
    target_id: Optional[int] = None
    detail: str = ""


class LoggingObserver:
    """Forward core events to the standard logging module."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or LOGGER

    def emit(self, event: ReactionEvent) -> None:
        self._logger.log(
            event.level,
            "%s message=%s emoji=%s target=%s %s",
            event.name,
            event.message_id,
            event.emoji,
            event.target_id,
            event.detail,
        )


class EventCollector:
    """Keep events in memory, mostly for tests and summaries."""

    def __init__(self) -> None:
        self.events: List[ReactionEvent] = []

    def emit(self, event: ReactionEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [event.name for event in self.events]


class NullObserver:
    """Discard every event."""

    def emit(self, event: ReactionEvent) -> None:
        return None
