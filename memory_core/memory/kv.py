"""
Abstract key-value persistence interface.

Defines the contract the message store relies on for durable records.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StorageError(RuntimeError):
    """Raised when the persistence backend cannot read or write records."""


class KeyValueStore(ABC):
    """
    Abstract base class for key-value persistence backends.

    Values are JSON-serializable dictionaries. Implementations must be safe
    to call from several threads and must make a single ``set`` or
    ``delete`` atomic.
    """

    def __init__(self) -> None:
        self._indexes: set[str] = set()

    @abstractmethod
    def set(self, key: str, value: dict[str, Any]) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Record key.
            value: Record payload.

        Raises:
            StorageError: If the write could not be made durable.
        """
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[dict[str, Any]]:
        """
        Get value by key.

        Args:
            key: Record key.

        Returns:
            The stored value if found, None otherwise.
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Record key.

        Returns:
            True if deleted, False if not found.
        """
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """
        List all stored keys.

        Returns:
            Keys in no particular order.
        """
        ...

    def delete_many(self, keys: list[str]) -> int:
        """
        Delete several keys.

        Override in subclasses that can batch the deletion.

        Returns:
            Number of keys that existed and were deleted.
        """
        return sum(1 for key in keys if self.delete(key))

    def create_index(self, field: str) -> None:
        """
        Declare a secondary index on a record field.

        Declarations are informational. Backends may use them to speed up
        queries, but callers must not rely on them for correctness.
        """
        self._indexes.add(field)

    @property
    def indexes(self) -> frozenset[str]:
        """Declared secondary index fields."""
        return frozenset(self._indexes)

    def initialize(self) -> None:
        """
        Initialize the store (e.g., create folders, load snapshot).

        Override in subclasses if needed.
        """
        pass

    def close(self) -> None:
        """
        Close the store and release resources.

        Override in subclasses if needed.
        """
        pass
