"""Domain entity representing a user and their notification settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_SUMMARY_TIME = "09:00"


@dataclass
class NotificationPreferences:
    """Per-user switches controlling which notifications are generated."""

    enabled: bool = True
    summarized: bool = False
    summary_time: str | None = DEFAULT_SUMMARY_TIME
    dm_enabled: bool = True
    job_fair_enabled: bool = True
    community_enabled: bool = True

    def wants_summary(self) -> bool:
        """Return ``True`` when the user receives batch digests."""

        return self.enabled and self.summarized


@dataclass
class User:
    """Subset of the account record consumed by the digest engine."""

    id: int | None
    username: str
    preferences: NotificationPreferences = field(default_factory=NotificationPreferences)
    last_login: datetime | None = None


__all__ = ["DEFAULT_SUMMARY_TIME", "NotificationPreferences", "User"]
