"""Shared constants used across the schema explorer."""
from __future__ import annotations

# Application version
VERSION: str = "1.0.0"

# Service names
SCHEMA_EXTRACTOR_SERVICE_NAME: str = "al-schema-explorer"
CLI_NAME: str = "al-schema"

# Project discovery
DEFAULT_SOURCE_GLOB: str = "**/*.al"
DEFAULT_MANIFEST_NAME: str = "app.json"
DEFAULT_EXCLUDE_DIRS: list[str] = ["node_modules", ".alpackages", ".git"]
DEFAULT_PROJECT_NAME: str = "AL Project"

# Table captions are only searched this far into a body without a fields block
CAPTION_SEARCH_LIMIT: int = 500

# UI-summary pseudo tables ("Sales Cue", "Activities Cues") carry no storage
SPECIAL_ENTITY_SUFFIXES: tuple[str, ...] = ("cue", "cues")
SPECIAL_ENTITY_MARKER: str = " cue "

# Warnings surfaced for empty projects
NO_SOURCE_FILES_WARNING: str = "No source files found in project"
NO_TABLES_WARNING: str = "No table objects found in project"

# Surfaced when the directory lacks the manifest or any source file
NOT_AL_PROJECT_WARNING: str = "Not an AL project: app.json or .al source files missing"
