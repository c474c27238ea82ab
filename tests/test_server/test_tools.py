"""Tests for the MCP tool handlers and their registration."""

from __future__ import annotations

import json

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from memory_server.arguments import ArgumentError
from memory_server.config import ServerSettings
from memory_server.tools import NO_MATCHES, NO_MESSAGES, MemoryTools, create_mcp_server


TOOL_NAMES = {
    "save_message",
    "get_last_message",
    "get_last_3_messages",
    "get_last_n_messages",
    "delete_older_than_hours",
    "delete_older_than_days",
    "delete_all_messages",
    "search_messages",
}


def _text(result) -> str:
    """Text of the first content block from `FastMCP.call_tool`."""
    if isinstance(result, tuple):
        result = result[0]
    return result[0].text


@pytest.fixture()
def tools(store) -> MemoryTools:
    return MemoryTools(store)


def test_save_then_get_last_message(tools) -> None:
    """The saved message is returned as JSON with its labels."""
    assert tools.save_message("ping", role="user", agent="bot-1") == "Message saved with ID: 1"

    payload = json.loads(tools.get_last_message())

    assert payload["id"] == 1
    assert payload["content"] == "ping"
    assert payload["role"] == "user"
    assert payload["agent"] == "bot-1"
    assert "timestamp" in payload


def test_save_applies_default_labels(tools) -> None:
    tools.save_message("hello", role="", agent=None)

    payload = json.loads(tools.get_last_message())

    assert payload["role"] == "assistant"
    assert payload["agent"] == "unknown"


def test_save_keeps_labels_verbatim(tools) -> None:
    tools.save_message("x", role=" user ", agent="bot ")

    payload = json.loads(tools.get_last_message())

    assert payload["role"] == " user "
    assert payload["agent"] == "bot "


def test_save_rejects_missing_content(tools, store) -> None:
    with pytest.raises(ArgumentError):
        tools.save_message("")
    with pytest.raises(ArgumentError):
        tools.save_message(None)

    assert store.count() == 0


def test_empty_store_reports_no_messages(tools) -> None:
    assert tools.get_last_message() == NO_MESSAGES
    assert tools.get_last_3_messages() == NO_MESSAGES
    assert tools.get_last_n_messages("5") == NO_MESSAGES
    assert tools.search_messages("anything") == NO_MATCHES


def test_get_last_3_messages(tools) -> None:
    """Five saves with alternating agents yield messages 3, 4 and 5."""
    for i in range(1, 6):
        tools.save_message(f"message {i}", agent="A" if i % 2 else "B")

    payload = json.loads(tools.get_last_3_messages())

    assert [item["id"] for item in payload] == [3, 4, 5]
    assert [item["agent"] for item in payload] == ["A", "B", "A"]


def test_get_last_n_messages_accepts_loose_counts(tools) -> None:
    for i in range(4):
        tools.save_message(f"message {i}")

    assert len(json.loads(tools.get_last_n_messages(2))) == 2
    assert len(json.loads(tools.get_last_n_messages("3"))) == 3
    assert len(json.loads(tools.get_last_n_messages(10.0))) == 4
    assert json.loads(tools.get_last_n_messages(0)) == []


def test_get_last_n_messages_rejects_bad_counts(tools) -> None:
    tools.save_message("message")

    with pytest.raises(ArgumentError):
        tools.get_last_n_messages("three")
    with pytest.raises(ArgumentError):
        tools.get_last_n_messages(-2)


def test_delete_older_than_hours_and_days(tools, clock) -> None:
    tools.save_message("ancient")
    clock.advance(days=3)
    tools.save_message("yesterday")
    clock.advance(hours=20)
    tools.save_message("now")

    assert tools.delete_older_than_days("2") == "Deleted 1 messages older than 2 days"
    assert tools.delete_older_than_hours(12.5) == "Deleted 1 messages older than 12 hours"
    assert tools.delete_older_than_hours(12) == "Deleted 0 messages older than 12 hours"

    with pytest.raises(ArgumentError):
        tools.delete_older_than_days("a while")


def test_delete_with_ages_beyond_the_calendar(tools, store) -> None:
    """Huge ages match nothing instead of failing."""
    tools.save_message("kept")

    assert tools.delete_older_than_days("1000000") == "Deleted 0 messages older than 1000000 days"
    assert tools.delete_older_than_hours(1e20).startswith("Deleted 0 messages older than ")
    assert store.count() == 1


def test_delete_all_messages(tools) -> None:
    tools.save_message("one")
    tools.save_message("two")

    assert tools.delete_all_messages() == "Deleted all 2 messages"
    assert tools.delete_all_messages() == "Deleted all 0 messages"
    assert tools.get_last_message() == NO_MESSAGES
    assert tools.search_messages("one") == NO_MATCHES


def test_search_messages(tools) -> None:
    """Keyword search is OR-ed, case-insensitive and optionally filtered."""
    tools.save_message("Hello from the user", role="user")
    tools.save_message("the world answers", role="assistant")
    tools.save_message("unrelated")

    payload = json.loads(tools.search_messages("hello world"))
    assert [item["id"] for item in payload] == [1, 2]

    filtered = json.loads(tools.search_messages("hello world", role="user"))
    assert [item["id"] for item in filtered] == [1]

    assert tools.search_messages("missing") == NO_MATCHES
    assert tools.search_messages("") == NO_MATCHES
    assert tools.search_messages("   ") == NO_MATCHES
    with pytest.raises(ArgumentError):
        tools.search_messages(None)


@pytest.mark.asyncio
async def test_mcp_server_registers_all_tools(store) -> None:
    """Every store operation is exposed as a tool with its parameters."""
    mcp = create_mcp_server(store, ServerSettings())

    registered = {tool.name: tool for tool in await mcp.list_tools()}

    assert set(registered) == TOOL_NAMES
    assert registered["save_message"].inputSchema["required"] == ["content"]
    assert registered["get_last_n_messages"].inputSchema["required"] == ["n"]
    assert "keywords" in registered["search_messages"].inputSchema["properties"]
    assert registered["delete_all_messages"].description == "Delete all messages from memory"


@pytest.mark.asyncio
async def test_call_tool_accepts_numeric_counts(store) -> None:
    """Counts arrive as strings or floats over the wire and are parsed once."""
    mcp = create_mcp_server(store, ServerSettings())
    for i in range(4):
        store.save(f"message {i}")

    by_text = json.loads(_text(await mcp.call_tool("get_last_n_messages", {"n": "3"})))
    by_float = json.loads(_text(await mcp.call_tool("get_last_n_messages", {"n": 2.7})))

    assert [item["id"] for item in by_text] == [2, 3, 4]
    assert [item["id"] for item in by_float] == [3, 4]


@pytest.mark.asyncio
async def test_call_tool_rejects_booleans_and_words(store) -> None:
    """A JSON boolean is not a count, and neither is free text."""
    mcp = create_mcp_server(store, ServerSettings())
    store.save("message")

    with pytest.raises(ToolError):
        await mcp.call_tool("get_last_n_messages", {"n": True})
    with pytest.raises(ToolError):
        await mcp.call_tool("delete_older_than_hours", {"hours": "x"})

    assert store.count() == 1


@pytest.mark.asyncio
async def test_call_tool_searches_with_blank_keywords(store) -> None:
    mcp = create_mcp_server(store, ServerSettings())
    store.save("message")

    assert _text(await mcp.call_tool("search_messages", {"keywords": "  "})) == NO_MATCHES
