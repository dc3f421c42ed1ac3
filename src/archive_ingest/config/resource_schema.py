"""
Schema validation for the archive-ingest resource catalogue.

This module provides Pydantic models to validate the structure of the
resources.yml configuration file. Each resource describes one vendor archive
family on the remote feed and the member files to take out of it:

    schema_version: "1.0"
    resources:
      prices:
        archive: /datafeeds/prices/fds_prices
        file_names: "prices_sec;prices_regional.txt"
        is_weekly: true
"""

import logging
import posixpath
from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

FILE_NAMES_SEPARATOR = ";"


class ResourcesValidationError(Exception):
    """Raised when resource catalogue validation fails."""

    pass


class ResourceSpec(BaseModel):
    """Which archive to resolve on the feed and which members to extract."""

    model_config = ConfigDict(frozen=True)

    archive: str = Field(
        ...,
        description="Remote directory plus the search term, e.g. /feeds/prices/fds_prices",
    )
    file_names: str = Field(
        ..., description="Semicolon-delimited member file names to extract"
    )
    is_weekly: bool = Field(
        default=False, description="Only consider full (weekly) archives"
    )

    @field_validator("archive")
    @classmethod
    def validate_archive(cls, v: str) -> str:
        if "\x00" in v:
            raise ValueError("Null byte in archive path")
        _, search_term = posixpath.split(v)
        if not search_term:
            raise ValueError(
                f"Archive path must end with a search term, got: {v!r}"
            )
        return v

    @field_validator("file_names")
    @classmethod
    def validate_file_names(cls, v: str) -> str:
        if not any(name.strip() for name in v.split(FILE_NAMES_SEPARATOR)):
            raise ValueError("file_names must list at least one member file")
        return v

    @property
    def directory(self) -> str:
        """Remote directory holding the archives."""
        return self.split_archive()[0]

    @property
    def search_term(self) -> str:
        """Substring an archive name must contain to be selected."""
        return self.split_archive()[1]

    @property
    def members(self) -> List[str]:
        """Member file names in configuration order."""
        return self.file_names.split(FILE_NAMES_SEPARATOR)

    def split_archive(self) -> Tuple[str, str]:
        return posixpath.split(self.archive)


class ResourcesConfig(BaseModel):
    """Schema for the complete resources.yml structure."""

    schema_version: str = Field(default="1.0", description="Catalogue schema version")
    resources: Dict[str, ResourceSpec] = Field(
        ..., min_length=1, description="Resource definitions keyed by name"
    )


def load_resources_config(config_path: str = "config/resources.yml") -> ResourcesConfig:
    """
    Load and validate the resource catalogue.

    Args:
        config_path: Path to the resources.yml file

    Returns:
        Validated ResourcesConfig instance

    Raises:
        ResourcesValidationError: If the file is missing, unreadable or invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise ResourcesValidationError(f"Resource configuration not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ResourcesValidationError(f"Invalid YAML in resource configuration: {e}")
    except OSError as e:
        raise ResourcesValidationError(f"Failed to load resource configuration: {e}")

    if not isinstance(data, dict):
        raise ResourcesValidationError(
            f"Resource configuration must be a mapping, got {type(data).__name__}"
        )

    try:
        config = ResourcesConfig(**data)
    except ValidationError as e:
        raise ResourcesValidationError(f"resources.yml validation failed: {e}")

    logger.info(
        "Loaded resource configuration with %d resources from %s",
        len(config.resources),
        config_path,
    )
    return config


def get_resource(
    resource_name: str, config_path: str = "config/resources.yml"
) -> ResourceSpec:
    """
    Get the validated definition of one resource.

    Raises:
        ResourcesValidationError: If validation fails or the resource is unknown
    """
    config = load_resources_config(config_path)
    if resource_name not in config.resources:
        available = sorted(config.resources.keys())
        raise ResourcesValidationError(
            f"Resource '{resource_name}' not found. Available: {available}"
        )
    return config.resources[resource_name]
