"""Tests for configuration management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from daily_tasks.config import (
    CacheConfig,
    LoggingConfig,
    ReminderConfig,
    RemoteConfig,
    Settings,
    get_settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Drop overrides that the test session sets."""
    for name in ("LOG_DIR", "CACHE_VERSION", "APP_ORIGIN", "CACHE_DIR", "TASK_SERVICE_URL"):
        monkeypatch.delenv(name, raising=False)


class TestLoggingConfig:
    """Test logging configuration."""

    def test_default_values(self, clean_env):
        """Test default logging configuration values."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert config.log_dir == Path("logs")
        assert config.max_bytes == 10_485_760  # 10MB
        assert config.backup_count == 5

    def test_from_environment(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG", "LOG_BACKUP_COUNT": "2"}):
            config = LoggingConfig()
            assert config.level == "DEBUG"
            assert config.backup_count == 2


class TestCacheConfig:
    """Test offline cache configuration."""

    def test_default_values(self, clean_env):
        config = CacheConfig()
        assert config.version == "v1"
        assert config.shell_url == "/index.html"
        assert config.cache_dir == Path(".cache/daily-tasks")
        assert config.skip_waiting_on_install is True

    def test_from_environment(self):
        """Test loading cache configuration from environment variables."""
        with patch.dict(
            os.environ,
            {
                "CACHE_VERSION": "v7",
                "APP_ORIGIN": "https://tasks.example.com",
                "CACHE_SKIP_WAITING": "false",
            },
        ):
            config = CacheConfig()
            assert config.version == "v7"
            assert config.origin == "https://tasks.example.com"
            assert config.skip_waiting_on_install is False

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            CacheConfig(fetch_timeout=0)


class TestReminderConfig:
    def test_default_values(self):
        config = ReminderConfig()
        assert config.title == "Task Reminder"
        assert config.icon == "/assets/generated/notification-bell.dim_64x64.png"
        assert config.toast_history == 50


class TestSettings:
    """Test main settings configuration."""

    def test_default_settings(self):
        """Test default settings configuration."""
        settings = Settings()
        assert isinstance(settings.logging, LoggingConfig)
        assert isinstance(settings.cache, CacheConfig)
        assert isinstance(settings.reminders, ReminderConfig)
        assert isinstance(settings.remote, RemoteConfig)

    def test_from_env_file(self, tmp_path, clean_env):
        """Test loading settings from .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            """
# local overrides
LOG_LEVEL=WARNING
CACHE_VERSION=v3
TASK_SERVICE_URL=https://api.tasks.example.com
"""
        )
        with patch.dict(os.environ, {"ENV_FILE": str(env_file)}):
            settings = Settings()
            assert settings.logging.level == "WARNING"
            assert settings.cache.version == "v3"
            assert settings.remote.base_url == "https://api.tasks.example.com"


class TestGetSettings:
    """Test settings singleton."""

    def test_singleton_pattern(self):
        """Test that get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_reset_settings(self):
        """Test resetting the settings singleton."""
        settings1 = get_settings()
        get_settings.cache_clear()
        settings2 = get_settings()
        assert settings1 is not settings2
