"""Tests for settings validation."""

from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from digest_api.config import Settings, get_settings, reset_settings_cache
from digest_api.utils import get_app_timezone


def _settings(**overrides) -> Settings:
    values = {"database_url": "sqlite://", "secret_key": "secret"}
    values.update(overrides)
    return Settings(**values)


def test_defaults():
    settings = _settings()

    assert settings.default_summary_time == "09:00"
    assert settings.summary_tick_seconds == 60.0
    assert settings.summary_source_retries == 1
    assert settings.cors_origin_list() == ["http://localhost:4530"]


@pytest.mark.parametrize("value", ["24:00", "9am", "12:7", ""])
def test_invalid_default_summary_time_is_rejected(value):
    with pytest.raises(ValidationError):
        _settings(default_summary_time=value)


def test_user_timeout_cannot_exceed_pass_timeout():
    with pytest.raises(ValidationError):
        _settings(summary_pass_timeout_seconds=10, summary_user_timeout_seconds=20)


def test_cors_origins_are_split():
    settings = _settings(cors_origins="http://a.test, http://b.test ,")

    assert settings.cors_origin_list() == ["http://a.test", "http://b.test"]


def test_settings_cache_reloads_from_environment(monkeypatch):
    original = get_settings()
    monkeypatch.setenv("SUMMARY_TICK_SECONDS", "5")
    try:
        reset_settings_cache()
        assert get_settings().summary_tick_seconds == 5.0
    finally:
        monkeypatch.delenv("SUMMARY_TICK_SECONDS")
        reset_settings_cache()
    assert get_settings().summary_tick_seconds == original.summary_tick_seconds


def test_app_timezone_follows_settings_reload(monkeypatch):
    monkeypatch.setenv("APP_TIMEZONE", "Europe/Berlin")
    try:
        reset_settings_cache()
        assert get_app_timezone() == ZoneInfo("Europe/Berlin")
    finally:
        monkeypatch.setenv("APP_TIMEZONE", "UTC")
        reset_settings_cache()
    assert get_app_timezone() == ZoneInfo("UTC")
