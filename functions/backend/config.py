"""
Configuration and settings for the post functions and the FastAPI service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import DEFAULT_FIRESTORE_TIMEOUT_SEC


class Settings(BaseSettings):
    """Environment-backed settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="")

    # Firestore
    google_cloud_project: Optional[str] = Field(
        default=None, validation_alias="GOOGLE_CLOUD_PROJECT"
    )
    firestore_timeout_sec: float = Field(
        default=DEFAULT_FIRESTORE_TIMEOUT_SEC,
        gt=0,
        validation_alias="FIRESTORE_TIMEOUT_SEC",
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="BLOG_USE_IN_MEMORY_BACKENDS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
