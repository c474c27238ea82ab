"""
Factory for creating message store instances.

Selects the persistence backend based on configuration.
"""

import logging
from typing import Optional

from memory_core.config import get_core_settings
from memory_core.memory.kv import KeyValueStore
from memory_core.memory.memory_kv import MemoryKeyValueStore
from memory_core.memory.message_store import MessageStore


logger = logging.getLogger(__name__)

# Global store instance
_store: Optional[MessageStore] = None


def get_kv_store() -> KeyValueStore:
    """
    Build the configured persistence backend.

    Uses MEMORY_BACKEND environment variable to select backend:
    - "file" (default): JSON snapshot in MEMORY_FOLDER
    - "memory": In-memory storage, lost on restart

    Raises:
        ValueError: If unknown backend specified.
    """
    settings = get_core_settings()
    backend = settings.backend.lower()

    if backend == "file":
        from memory_core.memory.file_kv import FileKeyValueStore

        logger.info(f"Using file message storage at {settings.storage_path}")
        return FileKeyValueStore(settings.storage_path)

    if backend == "memory":
        logger.info("Using in-memory message storage")
        return MemoryKeyValueStore()

    raise ValueError(
        f"Unknown memory backend: {backend}. "
        "Valid options: 'file', 'memory'"
    )


def get_message_store() -> MessageStore:
    """
    Get the process-wide message store instance.

    Returns:
        MessageStore instance; the app lifespan initializes it.
    """
    global _store

    if _store is None:
        _store = MessageStore(get_kv_store())

    return _store


def reset_store() -> None:
    """
    Reset the global store instance.

    Useful for testing.
    """
    global _store
    _store = None
