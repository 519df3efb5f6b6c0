"""Configuration management using Pydantic Settings.

This module provides centralized, type-safe configuration for graphweave.
Configuration is loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(env_prefix="APP_")

    env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


class GraphSettings(BaseSettings):
    """Graph engine settings."""

    model_config = SettingsConfigDict(env_prefix="GRAPH_")

    # What add_edges does when an endpoint is not in the graph
    on_missing_endpoint: Literal["create", "reject"] = "create"
    storage_path: Path = Path("./data/graphs")


class LayoutSettings(BaseSettings):
    """Default drawing area for layouters."""

    model_config = SettingsConfigDict(env_prefix="LAYOUT_")

    width: float = Field(default=1920.0, gt=0)
    height: float = Field(default=1080.0, gt=0)


class Settings(BaseSettings):
    """Main settings container aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    graph: GraphSettings = Field(default_factory=GraphSettings)
    layout: LayoutSettings = Field(default_factory=LayoutSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
