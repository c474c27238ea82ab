"""
MCP tool definitions for the message store.

``MemoryTools`` holds the synchronous handlers: argument validation, one
store call, and text serialization of the result. ``create_mcp_server``
registers them on a FastMCP instance, running each call in a worker thread.
"""

import asyncio
import json
import logging
from typing import Annotated, Any, Iterable, Optional, Union

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field, StrictFloat, StrictInt, StrictStr

from memory_core.memory import Message, MessageStore
from memory_server.arguments import (
    optional_text,
    parse_count,
    require_string,
    require_text,
)
from memory_server.config import ServerSettings, get_server_settings


logger = logging.getLogger(__name__)

NO_MESSAGES = "No messages found"
NO_MATCHES = "No messages found matching the keywords"

# Strict members keep JSON booleans from being coerced before parse_count
CountArg = Union[StrictInt, StrictFloat, StrictStr]


def _dump(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ToolError(f"Error marshaling messages: {e}") from e


def _dump_messages(messages: Iterable[Message]) -> str:
    return _dump([message.to_dict() for message in messages])


class MemoryTools:
    """Tool handlers bound to one message store."""

    def __init__(self, store: MessageStore) -> None:
        self.store = store

    def save_message(
        self,
        content: Any,
        role: Any = None,
        agent: Any = None,
    ) -> str:
        text = require_text(content, "content")
        message = self.store.save(
            text,
            role=optional_text(role, "assistant"),
            agent=optional_text(agent, "unknown"),
        )
        return f"Message saved with ID: {message.id}"

    def get_last_message(self) -> str:
        message = self.store.last()
        if message is None:
            return NO_MESSAGES
        return _dump(message.to_dict())

    def get_last_3_messages(self) -> str:
        messages = self.store.last_k(3)
        if not messages:
            return NO_MESSAGES
        return _dump_messages(messages)

    def get_last_n_messages(self, n: Any) -> str:
        count = parse_count(n, "n")
        if self.store.count() == 0:
            return NO_MESSAGES
        return _dump_messages(self.store.last_n(count))

    def delete_older_than_hours(self, hours: Any) -> str:
        value = parse_count(hours, "hours")
        deleted = self.store.delete_older_than_hours(value)
        return f"Deleted {deleted} messages older than {value} hours"

    def delete_older_than_days(self, days: Any) -> str:
        value = parse_count(days, "days")
        deleted = self.store.delete_older_than_days(value)
        return f"Deleted {deleted} messages older than {value} days"

    def delete_all_messages(self) -> str:
        deleted = self.store.delete_all()
        return f"Deleted all {deleted} messages"

    def search_messages(
        self,
        keywords: Any,
        role: Any = None,
        agent: Any = None,
    ) -> str:
        query = require_string(keywords, "keywords")
        matches = self.store.search(
            query,
            role=optional_text(role),
            agent=optional_text(agent),
        )
        if not matches:
            return NO_MATCHES
        logger.info(f"Found {len(matches)} messages matching keywords: {query}")
        return _dump_messages(matches)


def create_mcp_server(
    store: MessageStore,
    settings: Optional[ServerSettings] = None,
) -> FastMCP:
    """
    Build a FastMCP server exposing the message store tools.

    Args:
        store: Store the tools operate on.
        settings: Server settings; the cached instance when omitted.

    Returns:
        FastMCP instance ready to be mounted via ``streamable_http_app()``.
    """
    settings = settings or get_server_settings()
    tools = MemoryTools(store)

    mcp = FastMCP(
        settings.server_name,
        instructions="Save, retrieve, expire and search short-lived conversation messages.",
        host=settings.host,
        port=settings.http_port,
        streamable_http_path=settings.endpoint_path,
        json_response=settings.json_response,
        stateless_http=settings.stateless_http,
    )

    @mcp.tool(name="save_message", description="Save a message to memory")
    async def save_message(
        content: Annotated[str, Field(description="Content of the message")],
        role: Annotated[
            Optional[str],
            Field(
                description="Role of the message creator (assistant, user, system). "
                "Defaults to 'assistant' if not provided"
            ),
        ] = None,
        agent: Annotated[
            Optional[str],
            Field(description="Name of the agent. Defaults to 'unknown' if not provided"),
        ] = None,
    ) -> str:
        return await asyncio.to_thread(tools.save_message, content, role, agent)

    @mcp.tool(name="get_last_message", description="Get the last message")
    async def get_last_message() -> str:
        return await asyncio.to_thread(tools.get_last_message)

    @mcp.tool(name="get_last_3_messages", description="Get the last 3 messages")
    async def get_last_3_messages() -> str:
        return await asyncio.to_thread(tools.get_last_3_messages)

    @mcp.tool(name="get_last_n_messages", description="Get the last N messages")
    async def get_last_n_messages(
        n: Annotated[CountArg, Field(description="Number of messages to retrieve")],
    ) -> str:
        return await asyncio.to_thread(tools.get_last_n_messages, n)

    @mcp.tool(
        name="delete_older_than_hours",
        description="Delete messages older than N hours",
    )
    async def delete_older_than_hours(
        hours: Annotated[CountArg, Field(description="Number of hours")],
    ) -> str:
        return await asyncio.to_thread(tools.delete_older_than_hours, hours)

    @mcp.tool(
        name="delete_older_than_days",
        description="Delete messages older than N days",
    )
    async def delete_older_than_days(
        days: Annotated[CountArg, Field(description="Number of days")],
    ) -> str:
        return await asyncio.to_thread(tools.delete_older_than_days, days)

    @mcp.tool(name="delete_all_messages", description="Delete all messages from memory")
    async def delete_all_messages() -> str:
        return await asyncio.to_thread(tools.delete_all_messages)

    @mcp.tool(
        name="search_messages",
        description="Search messages by keywords in content",
    )
    async def search_messages(
        keywords: Annotated[
            str, Field(description="Keywords to search for in message content")
        ],
        role: Annotated[
            Optional[str], Field(description="Only match messages with this role")
        ] = None,
        agent: Annotated[
            Optional[str], Field(description="Only match messages from this agent")
        ] = None,
    ) -> str:
        return await asyncio.to_thread(tools.search_messages, keywords, role, agent)

    return mcp
