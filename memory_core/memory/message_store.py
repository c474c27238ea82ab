"""
Message store built on a key-value persistence backend.

Keeps an in-memory, insertion-ordered index of message keys together with
the id counter and the role/agent lookup maps. All of them change together
under one exclusive lock, so concurrent saves never share an id.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from memory_core.memory.kv import KeyValueStore
from memory_core.memory.locks import ReadWriteLock
from memory_core.memory.message import (
    DEFAULT_AGENT,
    DEFAULT_ROLE,
    Message,
    parse_message_key,
    utc_now,
)


logger = logging.getLogger(__name__)

INDEXED_FIELDS = ("timestamp", "role", "agent")

# Nothing is stamped before this, so it deletes nothing
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


class KeyIndex:
    """
    Ordered mirror of the message keys that currently have live records.

    ``snapshot`` takes the shared lock itself. Every other method expects
    the caller to hold ``write_locked()``.
    """

    def __init__(self) -> None:
        self._keys: list[str] = []
        self._lock = ReadWriteLock()

    def read_locked(self):
        return self._lock.read_locked()

    def write_locked(self):
        return self._lock.write_locked()

    def snapshot(self) -> list[str]:
        """Copy of the current key order."""
        with self._lock.read_locked():
            return list(self._keys)

    def keys(self) -> list[str]:
        return list(self._keys)

    def append(self, key: str) -> None:
        self._keys.append(key)

    def replace(self, keys: Iterable[str]) -> None:
        self._keys = list(keys)

    def clear(self) -> None:
        self._keys = []

    def __len__(self) -> int:
        return len(self._keys)


class IdAllocator:
    """
    Monotonic message id counter.

    Not thread-safe on its own: the message store only calls ``next``
    while holding the index write lock.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1:
            raise ValueError("id counter must start at 1 or above")
        self._next = start

    @classmethod
    def seeded(cls, existing_ids: Iterable[int]) -> "IdAllocator":
        """Start after the largest id already in use (or at 1)."""
        return cls(max(existing_ids, default=0) + 1)

    def next(self) -> int:
        value = self._next
        self._next += 1
        return value

    @property
    def peek(self) -> int:
        """The id the next save will receive."""
        return self._next


class MessageStore:
    """
    Save, list, expire and search messages.

    Features:
    - Ids are unique and strictly increasing, never reused after deletion
    - Reads snapshot the index and resolve records outside the lock
    - Index, id counter and role/agent maps mutate in one critical section

    Args:
        kv: Persistence backend holding the message records.
        clock: Returns the current timezone-aware time. Tests inject fakes.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._kv = kv
        self._clock = clock
        self._index = KeyIndex()
        self._ids = IdAllocator()
        self._by_role: dict[str, set[str]] = defaultdict(set)
        self._by_agent: dict[str, set[str]] = defaultdict(set)
        self._initialized = False

    # ----------------- lifecycle -----------------
    def initialize(self) -> None:
        """
        Open the backend and rebuild the index from the stored records.

        Raises:
            StorageError: If the backend cannot be opened.
        """
        self._kv.initialize()
        for field in INDEXED_FIELDS:
            self._kv.create_index(field)

        with self._index.write_locked():
            seen_ids: list[int] = []
            messages: list[Message] = []
            for key in self._kv.keys():
                message_id = parse_message_key(key)
                if message_id is None:
                    continue
                seen_ids.append(message_id)
                message = self._resolve(key)
                if message is not None:
                    messages.append(message)

            messages.sort(key=lambda m: m.id)
            self._index.replace(m.key for m in messages)
            self._ids = IdAllocator.seeded(seen_ids)
            self._by_role.clear()
            self._by_agent.clear()
            for message in messages:
                self._track(message)
            self._initialized = True

        logger.info(
            f"Message store ready: {len(messages)} messages, next ID {self._ids.peek}"
        )

    def close(self) -> None:
        """Release the backend."""
        with self._index.write_locked():
            self._index.clear()
            self._by_role.clear()
            self._by_agent.clear()
            self._initialized = False
        self._kv.close()

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ----------------- internals -----------------
    def _resolve(self, key: str) -> Optional[Message]:
        value = self._kv.get(key)
        if value is None:
            logger.debug(f"Skipping unresolved key: {key}")
            return None
        try:
            return Message.from_dict(value)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed record {key}: {e}")
            return None

    def _resolve_sorted(self, keys: Iterable[str]) -> list[Message]:
        messages = [m for m in map(self._resolve, keys) if m is not None]
        # Stable: equal timestamps keep index (id) order
        messages.sort(key=lambda m: m.timestamp)
        return messages

    def _track(self, message: Message) -> None:
        self._by_role[message.role].add(message.key)
        self._by_agent[message.agent].add(message.key)

    def _untrack(self, key: str) -> None:
        for lookup in (self._by_role, self._by_agent):
            for name in [name for name, keys in lookup.items() if key in keys]:
                lookup[name].discard(key)
                if not lookup[name]:
                    del lookup[name]

    # ----------------- save -----------------
    def save(
        self,
        content: str,
        role: Optional[str] = None,
        agent: Optional[str] = None,
    ) -> Message:
        """
        Persist a new message and make it visible to readers.

        Args:
            content: Message text.
            role: Author role, "assistant" when omitted.
            agent: Agent name, "unknown" when omitted.

        Returns:
            The stored message with its assigned id and timestamp.

        Raises:
            StorageError: If the backend write fails. The message is not
                indexed and its id is not handed out again.
        """
        with self._index.write_locked():
            message = Message(
                id=self._ids.next(),
                timestamp=self._clock(),
                content=content,
                role=role or DEFAULT_ROLE,
                agent=agent or DEFAULT_AGENT,
            )
            self._kv.set(message.key, message.to_dict())
            self._index.append(message.key)
            self._track(message)

        logger.info(
            f"Saved message ID: {message.id}, Role: {message.role}, "
            f"Agent: {message.agent}"
        )
        return message

    # ----------------- retrieval -----------------
    def list_sorted(self) -> list[Message]:
        """All resolvable messages, oldest first."""
        return self._resolve_sorted(self._index.snapshot())

    def last(self) -> Optional[Message]:
        """Most recent message, or None when the store is empty."""
        messages = self.list_sorted()
        return messages[-1] if messages else None

    def last_k(self, k: int) -> list[Message]:
        """
        Up to ``k`` most recent messages in chronological order.

        Asking for more than exist returns everything.
        """
        if k < 0:
            raise ValueError(f"k must be non-negative, got {k}")
        if k == 0:
            return []
        return self.list_sorted()[-k:]

    def last_n(self, n: int) -> list[Message]:
        """Caller-sized variant of :meth:`last_k`."""
        return self.last_k(n)

    def count(self) -> int:
        with self._index.read_locked():
            return len(self._index)

    def stats(self) -> dict:
        """Totals by role and agent."""
        with self._index.read_locked():
            return {
                "total": len(self._index),
                "next_id": self._ids.peek,
                "roles": {name: len(keys) for name, keys in self._by_role.items()},
                "agents": {name: len(keys) for name, keys in self._by_agent.items()},
            }

    # ----------------- retention -----------------
    def delete_older_than(self, cutoff: datetime) -> int:
        """
        Delete every message stamped strictly before ``cutoff``.

        Keys that no longer resolve are dropped from the index without
        being counted.

        Returns:
            Number of messages deleted.
        """
        with self._index.write_locked():
            retained: list[str] = []
            expired: list[str] = []
            for key in self._index.keys():
                value = self._kv.get(key)
                if value is None:
                    self._untrack(key)
                    continue
                try:
                    timestamp = Message.from_dict(value).timestamp
                except (KeyError, TypeError, ValueError):
                    retained.append(key)
                    continue
                if timestamp < cutoff:
                    expired.append(key)
                else:
                    retained.append(key)

            deleted = self._kv.delete_many(expired)
            self._index.replace(retained)
            for key in expired:
                self._untrack(key)

        if deleted:
            logger.info(f"Deleted {deleted} messages older than {cutoff.isoformat()}")
        return deleted

    def _cutoff(self, **age: int) -> datetime:
        """Now minus ``age``; ages past the calendar range clamp to its start."""
        try:
            return self._clock() - timedelta(**age)
        except OverflowError:
            return EARLIEST

    def delete_older_than_hours(self, hours: int) -> int:
        return self.delete_older_than(self._cutoff(hours=hours))

    def delete_older_than_days(self, days: int) -> int:
        return self.delete_older_than(self._cutoff(days=days))

    def delete_all(self) -> int:
        """
        Delete every indexed message.

        Returns:
            Number of keys removed from the index; 0 on an empty store.
        """
        with self._index.write_locked():
            keys = self._index.keys()
            if keys:
                self._kv.delete_many(keys)
            self._index.clear()
            self._by_role.clear()
            self._by_agent.clear()

        logger.info(f"Deleted all {len(keys)} messages")
        return len(keys)

    # ----------------- search -----------------
    def search(
        self,
        keywords: str,
        role: Optional[str] = None,
        agent: Optional[str] = None,
    ) -> list[Message]:
        """
        Messages whose content contains any of the keywords.

        Matching is a case-insensitive substring test per whitespace
        separated token; one hit is enough. ``role`` and ``agent`` narrow
        the candidates to exact label matches.

        Returns:
            Matches in chronological order, possibly empty.
        """
        tokens = keywords.lower().split()
        if not tokens:
            return []

        with self._index.read_locked():
            keys = self._index.keys()
            if role is not None:
                allowed = self._by_role.get(role, set())
                keys = [key for key in keys if key in allowed]
            if agent is not None:
                allowed = self._by_agent.get(agent, set())
                keys = [key for key in keys if key in allowed]

        return [
            message
            for message in self._resolve_sorted(keys)
            if any(token in message.content.lower() for token in tokens)
        ]
