"""Configuration management for archive-ingest.

This module provides centralized configuration loaded from environment variables
with validation using Pydantic BaseSettings, plus the YAML resource catalogue.

Usage:
    >>> from archive_ingest.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.staging_dir)
"""

from archive_ingest.config.resource_schema import (
    ResourcesConfig,
    ResourcesValidationError,
    ResourceSpec,
    get_resource,
    load_resources_config,
)
from archive_ingest.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "ResourceSpec",
    "ResourcesConfig",
    "ResourcesValidationError",
    "load_resources_config",
    "get_resource",
]
