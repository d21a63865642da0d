"""Tests for configuration management."""
from __future__ import annotations

import pytest

from src.shared.config import SchemaExtractorConfig, SharedConfig
from src.shared.constants import DEFAULT_EXCLUDE_DIRS, DEFAULT_MANIFEST_NAME, DEFAULT_SOURCE_GLOB

_ENV_VARS = (
    "LOG_LEVEL", "OBJECT_NAME_PREFIX", "SOURCE_GLOB", "MANIFEST_NAME",
    "EXCLUDE_DIRS", "MAX_WORKERS", "PROJECTS_ROOT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSharedConfig:
    def test_default_values(self):
        assert SharedConfig().log_level == "info"

    def test_env_override_log_level(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert SharedConfig().log_level == "debug"


class TestSchemaExtractorConfig:
    def test_default_values(self):
        config = SchemaExtractorConfig()
        assert config.object_name_prefix == ""
        assert config.source_glob == DEFAULT_SOURCE_GLOB
        assert config.manifest_name == DEFAULT_MANIFEST_NAME
        assert config.exclude_dir_list == DEFAULT_EXCLUDE_DIRS
        assert config.max_workers == 1
        assert config.projects_root == "."

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("OBJECT_NAME_PREFIX", "ABC ")
        monkeypatch.setenv("MAX_WORKERS", "4")
        monkeypatch.setenv("PROJECTS_ROOT", "/srv/al")
        monkeypatch.setenv("SOURCE_GLOB", "src/**/*.al")
        config = SchemaExtractorConfig()
        assert config.object_name_prefix == "ABC "
        assert config.max_workers == 4
        assert config.projects_root == "/srv/al"
        assert config.source_glob == "src/**/*.al"

    def test_exclude_dirs_are_split(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("EXCLUDE_DIRS", " .alpackages , ,build ")
        assert SchemaExtractorConfig().exclude_dir_list == [".alpackages", "build"]

    def test_max_workers_must_be_positive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MAX_WORKERS", "0")
        with pytest.raises(ValueError):
            SchemaExtractorConfig()

    def test_inherits_shared_config(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        config = SchemaExtractorConfig()
        assert isinstance(config, SharedConfig)
        assert config.log_level == "warning"
