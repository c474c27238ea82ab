"""
In-memory key-value storage implementation.

Non-durable backend using a Python dictionary.
"""

import copy
import logging
from threading import Lock
from typing import Any, Optional

from memory_core.memory.kv import KeyValueStore


logger = logging.getLogger(__name__)


class MemoryKeyValueStore(KeyValueStore):
    """
    In-memory key-value storage.

    Features:
    - Fast dictionary-based storage
    - Thread-safe operations

    Note: Data is lost on restart. Use FileKeyValueStore for persistence.
    """

    def __init__(self) -> None:
        super().__init__()
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = Lock()

    def set(self, key: str, value: dict[str, Any]) -> None:
        """Store a value."""
        with self._lock:
            self._records[key] = copy.deepcopy(value)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Get value by key."""
        with self._lock:
            value = self._records.get(key)
            return copy.deepcopy(value) if value is not None else None

    def delete(self, key: str) -> bool:
        """Delete a key."""
        with self._lock:
            if key in self._records:
                del self._records[key]
                return True
            return False

    def keys(self) -> list[str]:
        """List all stored keys."""
        with self._lock:
            return list(self._records)

    @property
    def record_count(self) -> int:
        """Get current number of records."""
        with self._lock:
            return len(self._records)
