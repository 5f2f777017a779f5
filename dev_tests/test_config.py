"""
Tests for config.py - Configuration management module.

Test Areas:
1. StorageSettings defaults and derived paths
2. Environment overrides in Config.load_from_environment()
"""

from pathlib import Path

import pytest

from config import Config, StorageSettings


# ============================================================================
# Fixtures
# ============================================================================

ENV_VARS = (
    "DATA_DIR",
    "MAX_FILE_SIZE_BYTES",
    "MAX_FILES_PER_REQUEST",
    "APP_HOST",
    "APP_PORT",
    "APP_RELOAD",
    "LOG_LEVEL",
    "CORS_ORIGINS",
    "HELP_FILE",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable Config reads so defaults apply."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ============================================================================
# StorageSettings
# ============================================================================

class TestStorageSettings:

    def test_defaults(self):
        settings = StorageSettings()
        assert settings.max_file_size_bytes == 10 * 1024 * 1024
        assert settings.max_files_per_request == 9
        assert settings.messages_path == Path("data") / "messages.json"
        assert settings.uploads_path == Path("data") / "uploads"

    def test_paths_follow_data_dir(self, tmp_path):
        settings = StorageSettings(data_dir=str(tmp_path))
        assert settings.messages_path == tmp_path / "messages.json"
        assert settings.uploads_path == tmp_path / "uploads"

    def test_rejects_non_positive_size_limit(self):
        with pytest.raises(ValueError):
            StorageSettings(max_file_size_bytes=0)


# ============================================================================
# Environment overrides
# ============================================================================

class TestEnvironmentLoading:

    def test_defaults_without_environment(self, clean_env):
        config = Config()
        assert config.APP_HOST == "0.0.0.0"
        assert config.APP_PORT == 7070
        assert config.APP_RELOAD is False
        assert config.LOG_LEVEL == "INFO"
        assert config.CORS_ORIGINS == ["*"]
        assert config.HELP_FILE == "HELP.md"

    def test_storage_overrides(self, clean_env, tmp_path):
        """
        Given: DATA_DIR and upload limits set in the environment
        When: Config() is created
        Then: The storage settings reflect them
        """
        clean_env.setenv("DATA_DIR", str(tmp_path))
        clean_env.setenv("MAX_FILE_SIZE_BYTES", "2048")
        clean_env.setenv("MAX_FILES_PER_REQUEST", "3")

        config = Config()

        assert config.STORAGE.data_dir == str(tmp_path)
        assert config.STORAGE.max_file_size_bytes == 2048
        assert config.STORAGE.max_files_per_request == 3

    @pytest.mark.parametrize("value", ["abc", "-5", "0"])
    def test_invalid_size_override_is_ignored(self, clean_env, value):
        clean_env.setenv("MAX_FILE_SIZE_BYTES", value)
        assert Config().STORAGE.max_file_size_bytes == 10 * 1024 * 1024

    def test_server_overrides(self, clean_env):
        clean_env.setenv("APP_HOST", "127.0.0.1")
        clean_env.setenv("APP_PORT", "9000")
        clean_env.setenv("APP_RELOAD", "yes")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = Config()

        assert config.APP_HOST == "127.0.0.1"
        assert config.APP_PORT == 9000
        assert config.APP_RELOAD is True
        assert config.LOG_LEVEL == "DEBUG"

    def test_help_file_override(self, clean_env, tmp_path):
        clean_env.setenv("HELP_FILE", str(tmp_path / "guide.md"))
        assert Config().HELP_FILE == str(tmp_path / "guide.md")

    def test_invalid_port_is_ignored(self, clean_env):
        clean_env.setenv("APP_PORT", "not-a-port")
        assert Config().APP_PORT == 7070

    def test_cors_origins_are_split(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", "http://localhost:3000, https://example.org ,")
        assert Config().CORS_ORIGINS == ["http://localhost:3000", "https://example.org"]

    def test_instances_do_not_share_storage(self, clean_env, tmp_path):
        clean_env.setenv("DATA_DIR", str(tmp_path))
        first = Config()
        clean_env.delenv("DATA_DIR")
        second = Config()
        assert first.STORAGE.data_dir == str(tmp_path)
        assert second.STORAGE.data_dir == "data"
