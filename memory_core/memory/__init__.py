"""
Memory storage module for message persistence.

Provides the key-value persistence contract, its implementations and the
message store built on top of them.
"""

from memory_core.memory.kv import KeyValueStore, StorageError
from memory_core.memory.memory_kv import MemoryKeyValueStore
from memory_core.memory.file_kv import FileKeyValueStore
from memory_core.memory.message import Message
from memory_core.memory.message_store import IdAllocator, KeyIndex, MessageStore
from memory_core.memory.factory import get_kv_store, get_message_store


__all__ = [
    "KeyValueStore",
    "StorageError",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "Message",
    "IdAllocator",
    "KeyIndex",
    "MessageStore",
    "get_kv_store",
    "get_message_store",
]
