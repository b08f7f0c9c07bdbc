"""Target message resolution by quoted text."""

from __future__ import annotations

import logging
from typing import Optional

from core.events import NullObserver, ReactionEvent
from core.models import Message
from core.ports import MessageStorePort, ObserverPort


def find_target(
    thread_id: int,
    quoted_text: str,
    store: MessageStorePort,
    observer: Optional[ObserverPort] = None,
) -> Optional[Message]:
    """Return the newest message in the thread whose text equals quoted_text.

    Comparison is exact and case-sensitive after trimming surrounding
    whitespace on both sides.
    """

    observer = observer or NullObserver()
    wanted = quoted_text.strip()
    messages = store.messages_in_thread(thread_id, newest_first=True)
    for message in messages:
        if message.get_text().strip() == wanted:
            observer.emit(
                ReactionEvent(
                    "target_found",
                    target_id=message.id,
                    detail=f"scanned {len(messages)} messages in thread {thread_id}",
                )
            )
            return message

    observer.emit(
        ReactionEvent(
            "target_missing",
            level=logging.WARNING,
            detail=f"no target message found for reaction text: {quoted_text!r}",
        )
    )
    return None
