"""
Application configuration models and helpers.

Centralizes settings management so the API layer, the storage backends and
the provider client share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """Base for every settings group; each reads the process env and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class CloudflareSettings(EnvSettings):
    """Configuration for reaching the Cloudflare v4 REST API."""

    api_base_url: str = Field(
        "https://api.cloudflare.com/client/v4",
        validation_alias="CLOUDFLARE_API_BASE_URL",
    )
    timeout_seconds: float = Field(30.0, validation_alias="CLOUDFLARE_TIMEOUT")
    page_size: int = Field(
        500,
        validation_alias="CLOUDFLARE_PAGE_SIZE",
        description="Zones and records are only ever read as a single page.",
    )
    read_attempts: int = Field(
        3,
        validation_alias="CLOUDFLARE_READ_ATTEMPTS",
        description="Transport retries for read-only calls. Writes are sent once.",
    )


class StorageSettings(EnvSettings):
    """Where delegated tokens are persisted."""

    sqlite_path: Optional[str] = Field(
        None,
        validation_alias="TOKEN_DB_PATH",
        description="Primary, queryable token table. Disabled when unset.",
    )
    blob_backend: Optional[Literal["sqlite", "dynamodb"]] = Field(
        None,
        validation_alias="TOKEN_BLOB_BACKEND",
        description="Secondary single-blob store. Disabled when unset.",
    )
    blob_sqlite_path: Optional[str] = Field(None, validation_alias="TOKEN_BLOB_SQLITE_PATH")
    dynamodb_table_name: Optional[str] = Field(
        None, validation_alias="TOKEN_BLOB_DYNAMODB_TABLE"
    )
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    blob_key: str = Field("user_tokens_list", validation_alias="TOKEN_BLOB_KEY")


class SecuritySettings(EnvSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting bound "
            "provider credentials at rest."
        ),
    )
    max_token_expiry_days: int = Field(365, validation_alias="TOKEN_MAX_EXPIRY_DAYS")


class AppSettings(EnvSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    cloudflare: CloudflareSettings = Field(default_factory=CloudflareSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "CloudflareSettings",
    "EnvSettings",
    "SecuritySettings",
    "StorageSettings",
    "get_settings",
]
