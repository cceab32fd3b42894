"""Application configuration settings."""

from __future__ import annotations

import re
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

_CLOCK_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret shared with the account service to verify JWT tokens",
        min_length=1,
    )
    jwt_algorithm: str = Field(
        default="HS256", description="Algorithm used to sign access tokens"
    )
    access_token_expire_minutes: int = Field(
        default=30,
        description="Number of minutes before locally issued access tokens expire",
        gt=0,
    )
    app_timezone: str | None = Field(
        default=None,
        description="IANA timezone (or UTC offset) used for summary times and timestamps",
    )
    cors_origins: str = Field(
        default="http://localhost:4530",
        description="Comma separated list of origins allowed to call the API",
    )
    summary_scheduler_enabled: bool = Field(
        default=True,
        description="Run the background summary scheduler inside the API process",
    )
    summary_tick_seconds: float = Field(
        default=60.0, description="Seconds between two scheduler passes", gt=0
    )
    summary_pass_timeout_seconds: float = Field(
        default=55.0, description="Upper bound for a single scheduler pass", gt=0
    )
    summary_user_timeout_seconds: float = Field(
        default=15.0, description="Upper bound for summarizing a single user", gt=0
    )
    summary_source_retries: int = Field(
        default=1,
        description="Extra attempts when an activity source query fails",
        ge=0,
        le=5,
    )
    default_summary_time: str = Field(
        default="09:00",
        description="Delivery time used when a user has no valid summary time",
    )

    @model_validator(mode="after")
    def _validate_summary_timing(self) -> "Settings":
        match = _CLOCK_PATTERN.match(self.default_summary_time.strip())
        if match is None or int(match.group("hour")) > 23 or int(match.group("minute")) > 59:
            raise ValueError("DEFAULT_SUMMARY_TIME must use the HH:MM 24-hour format")
        if self.summary_user_timeout_seconds > self.summary_pass_timeout_seconds:
            raise ValueError(
                "SUMMARY_USER_TIMEOUT_SECONDS cannot exceed SUMMARY_PASS_TIMEOUT_SECONDS"
            )
        return self

    def cors_origin_list(self) -> list[str]:
        """Return the configured CORS origins as a list."""

        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
