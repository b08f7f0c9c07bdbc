"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any storage-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

SMS = "sms"
MMS = "mms"


@dataclass(frozen=True)
class ParsedReaction:
    """A reaction extracted from a message body."""

    emoji: str
    original_message_text: str
    is_removal: bool = False


@dataclass
class Message:
    """Minimal message view used by the reaction pipeline.

    Only ``is_emoji_reaction`` is mutated by the core; everything else is
    owned by the message store.
    """

    id: int
    thread_id: int
    address: str
    date: datetime
    kind: str = SMS
    body: str = ""
    parts: List[str] = field(default_factory=list)
    is_emoji_reaction: bool = False

    def get_text(self) -> str:
        """Return the rendered plain text of the message."""

        if self.kind == MMS:
            return "\n".join(part for part in self.parts if part)
        return self.body or ""


@dataclass(frozen=True)
class ReactionRecord:
    """Persisted representation of a single emoji reaction."""

    id: int
    reaction_message_id: int
    sender_address: str
    emoji: str
    original_message_text: str
    thread_id: int
