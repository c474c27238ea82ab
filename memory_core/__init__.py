"""
Memory Core - Message storage for the MCP memory server.

This module provides the message store used by memory_server tool handlers.
"""

__version__ = "0.1.0"

from memory_core.memory import (
    KeyValueStore,
    Message,
    MessageStore,
    get_message_store,
)

__all__ = [
    "KeyValueStore",
    "Message",
    "MessageStore",
    "get_message_store",
]
