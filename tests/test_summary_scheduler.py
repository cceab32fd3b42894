"""Tests for the background digest scheduler."""

from __future__ import annotations

import asyncio
import time
from datetime import date, datetime, timedelta, timezone

import pytest

from digest_api.application.scheduler import SummaryScheduler, is_summary_due
from digest_api.application.use_cases.notifications import compose_summary
from digest_api.infrastructure import database
from digest_api.infrastructure.models import NotificationModel
from digest_api.infrastructure.repositories import SummaryDeliveryRepository

NOON = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)
INSIDE_WINDOW = datetime(2024, 5, 9, 10, 0, tzinfo=timezone.utc)


class RecordingPublisher:
    def __init__(self) -> None:
        self.dispatched = []

    def dispatch(self, notification) -> bool:
        self.dispatched.append(notification)
        return True


def _scheduler(publisher=None, **kwargs) -> SummaryScheduler:
    kwargs.setdefault("availability_check", lambda: True)
    return SummaryScheduler(database.SessionLocal, publisher=publisher, **kwargs)


def _ledger_status(session, username: str, summary_date: date) -> str | None:
    session.expire_all()
    return SummaryDeliveryRepository(session).get_status(username, summary_date)


def _seed_message_for(factory, username: str) -> None:
    chat = factory.chat(username, "bob")
    factory.message(chat, "bob", INSIDE_WINDOW)


@pytest.mark.parametrize(
    ("summary_time", "now", "last_date", "expected"),
    [
        ("09:00", NOON, None, True),
        ("12:00", NOON, None, True),
        ("12:01", NOON, None, False),
        ("09:00", NOON, date(2024, 5, 9), True),
        ("09:00", NOON, date(2024, 5, 10), False),
        ("23:30", NOON, date(2024, 5, 8), False),
        ("not-a-time", NOON, None, True),
        ("not-a-time", NOON.replace(hour=8), None, False),
        (None, NOON, None, True),
    ],
)
def test_is_summary_due(summary_time, now, last_date, expected):
    assert is_summary_due(summary_time, now, last_date) is expected


def test_due_user_receives_one_digest_per_day(factory, session):
    factory.user("alice", summary_time="09:00")
    _seed_message_for(factory, "alice")
    publisher = RecordingPublisher()
    scheduler = _scheduler(publisher)

    first = asyncio.run(scheduler.run_pass(NOON))
    second = asyncio.run(scheduler.run_pass(NOON + timedelta(minutes=1)))

    assert first.sent == ["alice"]
    assert second.due == 0
    assert [notification.recipient for notification in publisher.dispatched] == ["alice"]
    assert session.query(NotificationModel).count() == 1
    assert _ledger_status(session, "alice", NOON.date()) == "sent"


def test_user_is_not_due_before_summary_time(factory, session):
    factory.user("alice", summary_time="18:00")
    _seed_message_for(factory, "alice")

    report = asyncio.run(_scheduler(RecordingPublisher()).run_pass(NOON))

    assert report.considered == 1
    assert report.due == 0
    assert session.query(NotificationModel).count() == 0


def test_users_without_summaries_are_ignored(factory, session):
    factory.user("alice", summarized=False)
    factory.user("bob", enabled=False)

    report = asyncio.run(_scheduler().run_pass(NOON))

    assert report.considered == 0


def test_empty_digest_is_recorded_without_push(factory, session):
    factory.user("alice")
    publisher = RecordingPublisher()
    scheduler = _scheduler(publisher)

    report = asyncio.run(scheduler.run_pass(NOON))
    again = asyncio.run(scheduler.run_pass(NOON + timedelta(hours=1)))

    assert report.empty == ["alice"]
    assert again.due == 0
    assert publisher.dispatched == []
    assert _ledger_status(session, "alice", NOON.date()) == "empty"


def test_next_day_is_due_again(factory, session):
    factory.user("alice")
    _seed_message_for(factory, "alice")
    scheduler = _scheduler(RecordingPublisher())

    asyncio.run(scheduler.run_pass(NOON))
    next_day = asyncio.run(scheduler.run_pass(NOON + timedelta(days=1)))

    assert next_day.due == 1


def test_failure_for_one_user_does_not_stop_the_pass(factory, session):
    factory.user("alice")
    factory.user("bob")
    _seed_message_for(factory, "alice")
    chat = factory.chat("bob", "carol")
    factory.message(chat, "carol", INSIDE_WINDOW)

    def composer(db, username, **kwargs):
        if username == "alice":
            raise RuntimeError("boom")
        return compose_summary(db, username, **kwargs)

    publisher = RecordingPublisher()
    report = asyncio.run(_scheduler(publisher, composer=composer).run_pass(NOON))

    assert report.failed == ["alice"]
    assert report.sent == ["bob"]
    assert _ledger_status(session, "alice", NOON.date()) is None

    retry = asyncio.run(_scheduler(publisher).run_pass(NOON + timedelta(minutes=1)))
    assert retry.sent == ["alice"]


def _slow_composer(delay: float):
    def composer(db, username, **kwargs):
        time.sleep(delay)
        return compose_summary(db, username, **kwargs)

    return composer


def _pass_then_drain(scheduler: SummaryScheduler, now: datetime):
    async def scenario():
        report = await scheduler.run_pass(now)
        await scheduler.drain()
        return report

    return asyncio.run(scenario())


def test_slow_user_without_activity_stays_timed_out(factory, session):
    factory.user("alice")
    publisher = RecordingPublisher()

    scheduler = _scheduler(
        publisher, composer=_slow_composer(0.3), user_timeout_seconds=0.05
    )
    report = _pass_then_drain(scheduler, NOON)

    assert report.timed_out == ["alice"]
    assert publisher.dispatched == []
    assert _ledger_status(session, "alice", NOON.date()) == "timeout"

    again = asyncio.run(scheduler.run_pass(NOON + timedelta(minutes=1)))
    assert again.due == 0


def test_digest_finished_after_user_timeout_is_still_pushed(factory, session):
    factory.user("alice")
    _seed_message_for(factory, "alice")
    publisher = RecordingPublisher()

    scheduler = _scheduler(
        publisher, composer=_slow_composer(0.3), user_timeout_seconds=0.05
    )
    report = _pass_then_drain(scheduler, NOON)

    assert report.timed_out == ["alice"]
    assert report.sent == []
    assert session.query(NotificationModel).count() == 1
    assert [notification.recipient for notification in publisher.dispatched] == ["alice"]
    assert _ledger_status(session, "alice", NOON.date()) == "sent"

    again = _pass_then_drain(scheduler, NOON + timedelta(minutes=1))
    assert again.due == 0
    assert len(publisher.dispatched) == 1


def test_digest_cut_off_by_pass_timeout_is_settled(factory, session):
    factory.user("alice")
    _seed_message_for(factory, "alice")
    publisher = RecordingPublisher()

    scheduler = _scheduler(
        publisher,
        composer=_slow_composer(0.8),
        pass_timeout_seconds=0.3,
        user_timeout_seconds=5,
    )
    report = _pass_then_drain(scheduler, NOON)

    assert report.incomplete is True
    assert report.sent == []
    assert session.query(NotificationModel).count() == 1
    assert [notification.recipient for notification in publisher.dispatched] == ["alice"]
    assert _ledger_status(session, "alice", NOON.date()) == "sent"


def test_failure_after_pass_timeout_releases_the_claim(factory, session):
    factory.user("alice")

    def failing_composer(db, username, **kwargs):
        time.sleep(0.8)
        raise RuntimeError("boom")

    scheduler = _scheduler(
        RecordingPublisher(),
        composer=failing_composer,
        pass_timeout_seconds=0.3,
        user_timeout_seconds=5,
    )
    report = _pass_then_drain(scheduler, NOON)

    assert report.incomplete is True
    assert _ledger_status(session, "alice", NOON.date()) is None


def test_pass_is_skipped_when_database_is_down(factory, session):
    factory.user("alice")
    _seed_message_for(factory, "alice")

    report = asyncio.run(_scheduler(availability_check=lambda: False).run_pass(NOON))

    assert report.skipped is True
    assert report.considered == 0
    assert session.query(NotificationModel).count() == 0


def test_malformed_summary_time_is_scheduled_at_default(factory, session):
    factory.user("alice", summary_time="7pm")
    _seed_message_for(factory, "alice")

    early = asyncio.run(_scheduler().run_pass(NOON.replace(hour=8)))
    late = asyncio.run(_scheduler().run_pass(NOON))

    assert early.due == 0
    assert late.sent == ["alice"]


def test_start_and_stop_lifecycle(factory):
    factory.user("alice")
    checks = []

    def availability():
        checks.append(True)
        return True

    async def scenario():
        scheduler = _scheduler(
            availability_check=availability,
            tick_seconds=0.01,
            clock=lambda: NOON,
        )
        scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.1)
        await scheduler.stop()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert scheduler.running is False
    assert checks
