# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.MONGO_URI)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Every value has a development default, so the app starts against a local
# MongoDB without any configuration.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance, or via
    get_settings() when a fresh copy is needed (tests).
    """

    # -------------------------------------------------------------------------
    # Storage Configuration
    # -------------------------------------------------------------------------

    STORE_BACKEND: Literal["mongo", "memory"] = Field(
        default="mongo",
        description="Document store implementation ('memory' keeps data in-process)"
    )

    MONGO_URI: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection string"
    )

    MONGO_DB: str = Field(
        default="farmStandTake2",
        description="MongoDB database name"
    )

    MONGO_TIMEOUT_MS: int = Field(
        default=5000,
        ge=100,
        le=120000,
        description="Server selection timeout for MongoDB in milliseconds"
    )

    # Transactions need a replica set; standalone servers fall back to
    # compensating writes.
    MONGO_USE_TRANSACTIONS: bool = Field(
        default=False,
        description="Run multi-document writes inside a MongoDB transaction"
    )

    # -------------------------------------------------------------------------
    # Features
    # -------------------------------------------------------------------------

    ENABLE_FARMS: bool = Field(
        default=True,
        description="Mount the farm routes and resolve product owners"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)"
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level when DEBUG is off"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the server to"
    )

    API_PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Port for the server"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def log_level(self) -> str:
        """Effective log level; DEBUG overrides LOG_LEVEL."""
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
