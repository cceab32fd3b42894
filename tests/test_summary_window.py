"""Tests for the digest window resolution."""

from __future__ import annotations

from datetime import datetime, time, timedelta, timezone

import pytest

from digest_api.application.use_cases.notifications import parse_summary_time, resolve_since
from digest_api.domain.entities import NotificationPreferences

NOW = datetime(2024, 5, 10, 12, 30, 45, 123000, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("09:00", time(9, 0)),
        ("9:05", time(9, 5)),
        ("00:00", time(0, 0)),
        ("23:59", time(23, 59)),
        (" 07:15 ", time(7, 15)),
        ("24:00", None),
        ("12:60", None),
        ("9", None),
        ("09:0", None),
        ("nine", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_summary_time(value, expected):
    assert parse_summary_time(value) == expected


@pytest.mark.parametrize("summary_time", ["00:00", "06:45", "09:00", "13:00", "23:59"])
def test_default_window_starts_yesterday_at_summary_time(summary_time):
    preferences = NotificationPreferences(summary_time=summary_time)
    hour, minute = (int(part) for part in summary_time.split(":"))

    since = resolve_since(preferences, None, now=NOW)

    assert since == datetime(2024, 5, 9, hour, minute, tzinfo=timezone.utc)
    assert since.second == 0 and since.microsecond == 0


def test_recent_login_keeps_default_window():
    preferences = NotificationPreferences(summary_time="09:00")

    since = resolve_since(preferences, NOW - timedelta(hours=3), now=NOW)

    assert since == datetime(2024, 5, 9, 9, 0, tzinfo=timezone.utc)


def test_login_exactly_one_day_ago_keeps_default_window():
    preferences = NotificationPreferences(summary_time="09:00")

    since = resolve_since(preferences, NOW - timedelta(hours=24), now=NOW)

    assert since == datetime(2024, 5, 9, 9, 0, tzinfo=timezone.utc)


def test_stale_login_replaces_window():
    preferences = NotificationPreferences(summary_time="09:00")
    last_login = NOW - timedelta(days=3, minutes=17)

    since = resolve_since(preferences, last_login, now=NOW)

    assert since == last_login


def test_malformed_summary_time_uses_last_24_hours():
    preferences = NotificationPreferences(summary_time="25:99")

    since = resolve_since(preferences, None, now=NOW)

    assert since == NOW - timedelta(hours=24)


def test_missing_summary_time_falls_back_to_default():
    preferences = NotificationPreferences(summary_time=None)

    since = resolve_since(preferences, None, now=NOW)

    assert since == datetime(2024, 5, 9, 9, 0, tzinfo=timezone.utc)


def test_naive_now_is_read_in_app_timezone():
    preferences = NotificationPreferences(summary_time="18:30")

    since = resolve_since(preferences, None, now=datetime(2024, 5, 10, 8, 0))

    assert since == datetime(2024, 5, 9, 18, 30, tzinfo=timezone.utc)
