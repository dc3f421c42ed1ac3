"""
Configuration management for archive-ingest.

This module provides environment-based configuration using Pydantic BaseSettings,
allowing the same code to run against a development feed mirror, a staging
bucket and the production vendor feed while keeping credentials out of code.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("ARCHIVE_INGEST_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Environment variables are automatically loaded with the ARCHIVE_INGEST_
    prefix. For example, ARCHIVE_INGEST_STAGING_DIR overrides staging_dir.

    Fields without prefix:
    - ENVIRONMENT: Deployment environment (dev, staging, prod)
    - LOG_LEVEL: Logging level (uppercase)
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    app_name: str = Field(default="archive-ingest", description="Application name")

    # Remote feed configuration
    feed_transport: Literal["ftp", "local"] = Field(
        default="ftp",
        description="Feed client used for directory listing and download",
    )
    feed_host: str = Field(default="localhost", description="Feed server host")
    feed_port: int = Field(default=21, description="Feed server port")
    feed_user: str = Field(default="anonymous", description="Feed login user")
    feed_password: str = Field(default="", description="Feed login password")
    feed_use_tls: bool = Field(
        default=True, description="Use explicit FTPS (AUTH TLS) for the feed"
    )
    feed_timeout: int = Field(
        default=60, description="Feed socket timeout in seconds"
    )
    feed_root: str = Field(
        default="./feed",
        description="Root directory served by the local feed client",
    )

    # Staging area
    staging_dir: str = Field(
        default="./staging",
        description="Local directory receiving downloaded archives",
    )
    weekly_dir: str = Field(
        default="weekly",
        description="Staging subdirectory for files from full (weekly) archives",
    )
    daily_dir: str = Field(
        default="daily",
        description="Staging subdirectory for files from delta (daily) archives",
    )
    cleanup_staging: bool = Field(
        default=True,
        description="Remove uploaded files and archives after a successful run",
    )

    # Object storage
    s3_bucket: str = Field(default="", description="Destination S3 bucket")
    s3_prefix: str = Field(default="", description="Key prefix inside the bucket")
    s3_region: Optional[str] = Field(default=None, description="AWS region")
    s3_endpoint_url: Optional[str] = Field(
        default=None, description="Custom endpoint for S3-compatible services"
    )
    aws_access_key_id: Optional[str] = Field(
        default=None, description="AWS access key (default credential chain if unset)"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, description="AWS secret key (default credential chain if unset)"
    )

    resources_config: str = Field(
        default="./config/resources.yml",
        description="Path to the resource catalogue",
    )

    @field_validator("weekly_dir", "daily_dir")
    @classmethod
    def validate_cadence_dir(cls, v: str) -> str:
        """Cadence directories are single path segments below staging_dir."""
        v = v.strip()
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Cadence directory must be a plain name, got: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_distinct_cadence_dirs(self) -> "Settings":
        """Weekly and daily files must not share a staging directory."""
        if self.weekly_dir == self.daily_dir:
            raise ValueError(
                "weekly_dir and daily_dir must differ, "
                f"both are set to '{self.weekly_dir}'"
            )
        return self

    @model_validator(mode="after")
    def validate_production_upload_target(self) -> "Settings":
        """Production runs must name a bucket to upload into."""
        if self.ENVIRONMENT == "prod" and not self.s3_bucket:
            logger.error("configuration.missing_bucket", environment=self.ENVIRONMENT)
            raise ValueError(
                "Production environment requires ARCHIVE_INGEST_S3_BUCKET to be set"
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="ARCHIVE_INGEST_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
