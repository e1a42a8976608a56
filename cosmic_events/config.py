"""
Configuration and settings for the event site backend.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Document store (MongoDB preferred, any SQLAlchemy URL as fallback)
    mongodb_uri: Optional[str] = Field(default=None)
    mongodb_database: str = Field(default="Cosmic")
    mongodb_collection: str = Field(default="events")
    mongodb_timeout_ms: int = Field(default=5000, ge=1)
    database_url: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # JSON array files
    data_dir: str = Field(default=".")
    contact_file: str = Field(default="contact1.json")
    event_file: str = Field(default="data.json")
    dashboard_file: str = Field(default="dashboard.json")

    # Pages and assets
    templates_dir: str = Field(default=str(PACKAGE_DIR / "templates"))
    static_dir: str = Field(default="public")
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    log_level: str = Field(default="INFO")

    def data_path(self, filename: str) -> str:
        return os.path.join(self.data_dir, filename)

    @property
    def contact_path(self) -> str:
        return self.data_path(self.contact_file)

    @property
    def event_path(self) -> str:
        return self.data_path(self.event_file)

    @property
    def dashboard_path(self) -> str:
        return self.data_path(self.dashboard_file)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
