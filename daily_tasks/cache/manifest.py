"""Precache manifest for the application shell."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PRECACHE_URLS: tuple[str, ...] = (
    "/",
    "/index.html",
    "/assets/generated/app-icon.dim_128x128.png",
    "/assets/generated/app-icon.dim_256x256.png",
    "/assets/generated/app-icon.dim_512x512.png",
    "/assets/generated/calendar-icon.dim_64x64.png",
    "/assets/generated/checkmark-success.dim_64x64.png",
    "/assets/generated/notification-bell.dim_64x64.png",
    "/assets/generated/progress-chart.dim_64x64.png",
    "/assets/generated/settings-notifications-transparent.dim_64x64.png",
    "/assets/generated/streak-flame.dim_64x64.png",
    "/assets/generated/weekly-chart.dim_400x300.png",
)


class PrecacheManifest(BaseModel):
    """Ordered resources that must be stored before the shell is installed."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(description="Version token the manifest belongs to")
    urls: tuple[str, ...] = Field(default=DEFAULT_PRECACHE_URLS)

    @field_validator("urls")
    @classmethod
    def reject_duplicates(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Each resource appears once."""
        if len(set(v)) != len(v):
            raise ValueError("Precache manifest contains duplicate URLs")
        return v

    def __len__(self) -> int:
        return len(self.urls)

    @property
    def precache_name(self) -> str:
        """Generation filled eagerly at install time."""
        return f"daily-tasks-{self.version}"

    @property
    def runtime_name(self) -> str:
        """Generation filled opportunistically by successful fetches."""
        return f"daily-tasks-runtime-{self.version}"

    @property
    def cache_names(self) -> frozenset[str]:
        """Every generation that is live for this version."""
        return frozenset({self.precache_name, self.runtime_name})
