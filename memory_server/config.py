"""
Server configuration management for the MCP memory server.

Uses pydantic-settings for environment-based configuration.
Storage settings are managed by memory_core.config.CoreSettings.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_FILE = "mcp.server.env" if os.path.exists("mcp.server.env") else ".env"


class ServerSettings(BaseSettings):
    """Server configuration loaded from environment variables.

    Note: the storage folder and backend are managed by
    memory_core.config.CoreSettings (MEMORY_ prefix).
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MCP_",
    )

    # Server settings
    host: str = "0.0.0.0"
    http_port: int = 9091
    debug: bool = False
    reload: bool = False

    # MCP settings
    server_name: str = "mcp-memory-server"
    endpoint_path: str = "/mcp"
    json_response: bool = False
    stateless_http: bool = False


@lru_cache
def get_server_settings() -> ServerSettings:
    """Get cached server settings instance."""
    return ServerSettings()
