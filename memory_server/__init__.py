"""
MCP Memory Server - Tool-call surface for the message store.

This module exposes memory_core operations as MCP tools over streamable
HTTP, next to plain FastAPI health endpoints.
"""

__version__ = "0.1.0"
