"""Runtime settings for ``spend_anomalies`` read from the environment.

Every setting uses the ``SPEND_ANOMALIES_`` prefix. The CLI loads a local
``.env`` into the environment first, so values there are picked up too.
Settings are read on each call to :func:`get_settings` rather than cached,
so a changed environment takes effect immediately.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_EXCLUDED_CATEGORIES: tuple[str, ...] = ("Payment", "Investment")


class Settings(BaseSettings):
    """Package settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SPEND_ANOMALIES_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Level name or number for package logs")
    # Comma-separated; an empty value disables exclusions.
    excluded_categories_raw: str | None = Field(
        default=None,
        validation_alias="SPEND_ANOMALIES_EXCLUDED_CATEGORIES",
        description="Categories left out of the default scan selection",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    @property
    def excluded_categories(self) -> tuple[str, ...]:
        if self.excluded_categories_raw is None:
            return DEFAULT_EXCLUDED_CATEGORIES
        return tuple(c.strip() for c in self.excluded_categories_raw.split(",") if c.strip())


def get_settings() -> Settings:
    """Return settings for the current environment."""

    return Settings()


__all__ = ["DEFAULT_EXCLUDED_CATEGORIES", "Settings", "get_settings"]
