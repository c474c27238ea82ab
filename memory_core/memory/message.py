"""Message record persisted by the message store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


DEFAULT_ROLE = "assistant"
DEFAULT_AGENT = "unknown"

KEY_PREFIX = "message_"
_KEY_PATTERN = re.compile(rf"^{KEY_PREFIX}(\d+)$")


def message_key(message_id: int) -> str:
    """Storage key for a message id."""
    return f"{KEY_PREFIX}{message_id}"


def parse_message_key(key: str) -> Optional[int]:
    """Return the id encoded in ``key``, or None for foreign keys."""
    match = _KEY_PATTERN.match(key)
    if match is None:
        return None
    return int(match.group(1))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """
    A single remembered conversation turn.

    Attributes:
        id: Unique identifier, never reused within a store.
        timestamp: When the message was saved (timezone-aware UTC).
        content: Message text.
        role: Author role (assistant, user, system...).
        agent: Name of the agent that saved the message.
    """

    id: int
    timestamp: datetime
    content: str
    role: str = DEFAULT_ROLE
    agent: str = DEFAULT_AGENT

    @property
    def key(self) -> str:
        return message_key(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "content": self.content,
            "role": self.role,
            "agent": self.agent,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        if not isinstance(timestamp, datetime):
            raise TypeError(
                f"timestamp must be an ISO-8601 string, got {type(timestamp).__name__}"
            )
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            id=int(data["id"]),
            timestamp=timestamp,
            content=data.get("content", ""),
            role=data.get("role") or DEFAULT_ROLE,
            agent=data.get("agent") or DEFAULT_AGENT,
        )
