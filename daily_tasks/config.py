"""Configuration management for the offline cache and reminder scheduler."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    max_bytes: int = Field(default=10_485_760, description="Max size of log file in bytes")
    backup_count: int = Field(default=5, description="Number of backup log files to keep")

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable overrides."""
        data["level"] = os.environ.get("LOG_LEVEL", data.get("level", "INFO"))
        data["format"] = os.environ.get("LOG_FORMAT", data.get("format", "json"))
        if log_dir := os.environ.get("LOG_DIR"):
            data["log_dir"] = Path(log_dir)
        if max_bytes := os.environ.get("LOG_MAX_BYTES"):
            data["max_bytes"] = int(max_bytes)
        if backup_count := os.environ.get("LOG_BACKUP_COUNT"):
            data["backup_count"] = int(backup_count)
        super().__init__(**data)


class CacheConfig(BaseModel):
    """Offline resource cache configuration."""

    version: str = Field(default="v1", description="Cache generation version token")
    origin: str = Field(
        default="http://localhost:8080", description="Origin of the application shell"
    )
    shell_url: str = Field(
        default="/index.html", description="Entry point served when navigation is offline"
    )
    cache_dir: Path = Field(
        default=Path(".cache/daily-tasks"), description="Directory for the filesystem store"
    )
    skip_waiting_on_install: bool = Field(
        default=True, description="Activate a freshly installed worker without waiting"
    )
    fetch_timeout: float = Field(default=30.0, description="Network timeout in seconds", gt=0)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable overrides."""
        if version := os.environ.get("CACHE_VERSION"):
            data["version"] = version
        if origin := os.environ.get("APP_ORIGIN"):
            data["origin"] = origin
        if cache_dir := os.environ.get("CACHE_DIR"):
            data["cache_dir"] = Path(cache_dir)
        if skip_waiting := os.environ.get("CACHE_SKIP_WAITING"):
            data["skip_waiting_on_install"] = skip_waiting.lower() in ("true", "1", "yes")
        if timeout := os.environ.get("CACHE_FETCH_TIMEOUT"):
            data["fetch_timeout"] = float(timeout)
        super().__init__(**data)


class ReminderConfig(BaseModel):
    """Task reminder configuration."""

    title: str = Field(default="Task Reminder", description="Native notification title")
    icon: str = Field(
        default="/assets/generated/notification-bell.dim_64x64.png",
        description="Icon shown with native notifications",
    )
    toast_history: int = Field(
        default=50, description="Number of in-page messages kept for display", gt=0
    )

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable overrides."""
        if title := os.environ.get("REMINDER_TITLE"):
            data["title"] = title
        if icon := os.environ.get("REMINDER_ICON"):
            data["icon"] = icon
        super().__init__(**data)


class RemoteConfig(BaseModel):
    """Remote task service configuration."""

    base_url: str = Field(
        default="http://localhost:8000", description="Base URL of the task service"
    )
    timeout: float = Field(default=10.0, description="Request timeout in seconds", gt=0)

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable overrides."""
        data["base_url"] = os.environ.get(
            "TASK_SERVICE_URL", data.get("base_url", "http://localhost:8000")
        )
        if timeout := os.environ.get("TASK_SERVICE_TIMEOUT"):
            data["timeout"] = float(timeout)
        super().__init__(**data)


class Settings(BaseModel):
    """Main application settings."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    reminders: ReminderConfig = Field(default_factory=ReminderConfig)
    remote: RemoteConfig = Field(default_factory=RemoteConfig)

    def __init__(self, **data: Any) -> None:
        """Initialize settings, optionally loading from .env file."""
        if env_file := os.environ.get("ENV_FILE"):
            self._load_env_file(Path(env_file))
        super().__init__(**data)

    def _load_env_file(self, env_file: Path) -> None:
        """Load environment variables from .env file."""
        if not env_file.exists():
            return

        with open(env_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    os.environ[key.strip()] = value.strip()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance."""
    return Settings()
