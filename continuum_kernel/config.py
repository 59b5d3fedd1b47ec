"""
Configuration settings using Pydantic Settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Kernel settings loaded from CONTINUUM_* environment variables."""

    DOCUMENT_SERVICE_URL: str = "http://localhost:3000"
    READINESS_SERVICE_URL: str = "http://localhost:3000"
    HTTP_TIMEOUT_SECONDS: float = 5.0

    # {workspace_id} is substituted when present
    GOVERNANCE_DOCUMENT_KEY: str = "continuum-workspace-governance.md"
    MODEL_REGISTRY_KEY: str = "continuum-llm-model-registry.md"
    # None caches until invalidate() is called
    REGISTRY_CACHE_TTL_SECONDS: Optional[float] = None

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CONTINUUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    :return: Cached Settings instance
    :rtype: Settings
    """
    return Settings()
