"""Compute the lower bound of a digest's aggregation window."""

from __future__ import annotations

import logging
import re
from datetime import datetime, time, timedelta
from typing import Final

from digest_api.domain.entities import DEFAULT_SUMMARY_TIME, NotificationPreferences
from digest_api.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

ROLLING_WINDOW: Final[timedelta] = timedelta(hours=24)
_SUMMARY_TIME_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$"
)


def parse_summary_time(value: str | None) -> time | None:
    """Parse an ``HH:MM`` 24-hour clock value, returning ``None`` when invalid."""

    if not isinstance(value, str):
        return None
    match = _SUMMARY_TIME_PATTERN.match(value.strip())
    if match is None:
        return None
    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def resolve_since(
    preferences: NotificationPreferences,
    last_login: datetime | None = None,
    *,
    now: datetime | None = None,
) -> datetime:
    """Return the instant after which activity counts as new.

    The default window starts yesterday at the user's summary time. Users
    whose last login is more than a day old get everything since that login
    instead. An unparseable summary time degrades to the last 24 hours.
    """

    current = ensure_app_timezone(now) if now is not None else now_in_app_timezone()

    last_seen = ensure_app_timezone(last_login)
    if last_seen is not None and current - last_seen > ROLLING_WINDOW:
        return last_seen

    raw_time = preferences.summary_time or DEFAULT_SUMMARY_TIME
    summary_time = parse_summary_time(raw_time)
    if summary_time is None:
        logger.debug("Malformed summary time %r; using the last 24 hours", raw_time)
        return current - ROLLING_WINDOW

    yesterday = current - timedelta(days=1)
    return yesterday.replace(
        hour=summary_time.hour,
        minute=summary_time.minute,
        second=0,
        microsecond=0,
    )


__all__ = ["ROLLING_WINDOW", "parse_summary_time", "resolve_since"]
