"""Configuration management for BlobCMS.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once per process
and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BLOBCMS_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application Settings
    app_name: str = "BlobCMS"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Storage Settings
    storage_provider: Literal["s3", "local", "memory"] = "s3"
    s3_bucket: str | None = Field(
        default=None,
        validation_alias=AliasChoices("blobcms_s3_bucket", "s3_bucket_name"),
        description="Bucket holding the registry and collection documents",
    )
    s3_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("blobcms_s3_region", "aws_region"),
    )
    s3_access_key_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("blobcms_s3_access_key_id", "aws_access_key_id"),
    )
    s3_secret_access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("blobcms_s3_secret_access_key", "aws_secret_access_key"),
    )
    s3_endpoint_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("blobcms_s3_endpoint_url", "s3_endpoint"),
    )
    s3_force_path_style: bool = Field(
        default=False,
        validation_alias=AliasChoices("blobcms_s3_force_path_style", "s3_force_path_style"),
    )
    local_storage_path: str = "./cms_data"

    # Document Layout Settings
    registry_key: str = "cms-schemas.json"
    collection_key_prefix: str = "data/"
    collection_key_suffix: str = ".json"

    @field_validator("registry_key")
    @classmethod
    def validate_registry_key(cls, v: str) -> str:
        """Registry key must name an object, not a prefix."""
        if not v or v.endswith("/"):
            raise ValueError("registry_key must be a non-empty object key")
        return v

    @model_validator(mode="after")
    def validate_s3_bucket(self) -> "Settings":
        """Require a bucket when the S3 provider is selected."""
        if self.storage_provider == "s3" and not self.s3_bucket:
            raise ValueError(
                "storage_provider is 's3' but no bucket is configured. "
                "Set BLOBCMS_S3_BUCKET (or S3_BUCKET_NAME)."
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
