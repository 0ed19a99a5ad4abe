"""
Configuration and settings for the band site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service and callables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    band_name: str = Field(default="Jokers Live Band")

    # Firebase project and Cloud Storage bucket
    firebase_project_id: Optional[str] = Field(default=None)
    storage_bucket: Optional[str] = Field(default=None)
    session_cookie_name: str = Field(default="__session")
    session_cookie_days: int = Field(default=5)

    # Alternative content store (SQLAlchemy URL, e.g. sqlite for local runs)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible storage (Tencent COS), used instead of Cloud Storage when set
    cos_endpoint: Optional[str] = Field(default=None)
    cos_region: Optional[str] = Field(default=None)
    cos_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Page cache (Redis)
    redis_url: Optional[str] = Field(default=None)
    page_cache_ttl_seconds: int = Field(default=3600)

    # LLM / Gemini
    gemini_api_key: Optional[str] = Field(default=None)

    # Booking inquiries (SMTP)
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_username: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    booking_email_to: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
