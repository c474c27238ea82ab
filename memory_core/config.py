"""
Shared configuration for memory_core module.

Uses pydantic-settings for environment-based configuration.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


ENV_FILE = "mcp.server.env" if os.path.exists("mcp.server.env") else ".env"


class CoreSettings(BaseSettings):
    """Core configuration loaded from environment variables.

    ``MEMORY_FOLDER`` selects the directory holding the message snapshot.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MEMORY_",
    )

    # Persistence backend
    backend: str = "file"  # "file" | "memory"

    # File backend settings
    folder: str = "."
    file_name: str = "messages.json"

    @property
    def storage_path(self) -> str:
        """Full path of the message snapshot file."""
        return os.path.join(self.folder or ".", self.file_name)


@lru_cache
def get_core_settings() -> CoreSettings:
    """Get cached core settings instance."""
    return CoreSettings()
