"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

NOTIFICATION_TYPE_DM = "dm"
NOTIFICATION_TYPE_JOB_FAIR = "jobFair"
NOTIFICATION_TYPE_COMMUNITY = "community"
NOTIFICATION_TYPE_SUMMARY = "summary"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: int | None
    recipient: str
    type: str
    title: str
    message: str
    read: bool = False
    related_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_summary(self) -> bool:
        return self.type == NOTIFICATION_TYPE_SUMMARY


__all__ = [
    "NOTIFICATION_TYPE_COMMUNITY",
    "NOTIFICATION_TYPE_DM",
    "NOTIFICATION_TYPE_JOB_FAIR",
    "NOTIFICATION_TYPE_SUMMARY",
    "Notification",
]
