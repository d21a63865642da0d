"""Shared configuration management using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from src.shared.constants import (
    DEFAULT_EXCLUDE_DIRS,
    DEFAULT_MANIFEST_NAME,
    DEFAULT_SOURCE_GLOB,
)


class SharedConfig(BaseSettings):
    """Base configuration shared across all entry points."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class SchemaExtractorConfig(SharedConfig):
    """Configuration for the schema extractor HTTP and MCP surfaces."""
    object_name_prefix: str = Field(default="", validation_alias="OBJECT_NAME_PREFIX")
    source_glob: str = Field(default=DEFAULT_SOURCE_GLOB, validation_alias="SOURCE_GLOB")
    manifest_name: str = Field(
        default=DEFAULT_MANIFEST_NAME, validation_alias="MANIFEST_NAME"
    )
    exclude_dirs: str = Field(
        default=",".join(DEFAULT_EXCLUDE_DIRS), validation_alias="EXCLUDE_DIRS"
    )
    max_workers: int = Field(default=1, ge=1, validation_alias="MAX_WORKERS")
    projects_root: str = Field(default=".", validation_alias="PROJECTS_ROOT")

    @property
    def exclude_dir_list(self) -> list[str]:
        """Return ``exclude_dirs`` split on commas, blanks dropped."""
        return [part.strip() for part in self.exclude_dirs.split(",") if part.strip()]
