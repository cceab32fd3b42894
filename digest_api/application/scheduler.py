"""Background loop delivering daily digests at each user's chosen time."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, TypeVar

from sqlalchemy.orm import Session

from digest_api.application.use_cases.notifications import (
    compose_summary,
    parse_summary_time,
)
from digest_api.config import Settings, get_settings
from digest_api.domain.entities import (
    DEFAULT_SUMMARY_TIME,
    SUMMARY_DELIVERY_EMPTY,
    SUMMARY_DELIVERY_NOT_CONFIGURED,
    SUMMARY_DELIVERY_SENT,
    SUMMARY_DELIVERY_TIMEOUT,
    SummaryOutcome,
    SummaryStatus,
)
from digest_api.infrastructure.database import SessionLocal, is_database_available
from digest_api.infrastructure.notifications import NotificationPublisher, notification_publisher
from digest_api.infrastructure.repositories import SummaryDeliveryRepository, UserRepository
from digest_api.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

T = TypeVar("T")

Composer = Callable[..., SummaryOutcome]


@dataclass
class SummaryPassReport:
    """What a single scheduler pass did, per user."""

    started_at: datetime
    considered: int = 0
    due: int = 0
    sent: list[str] = field(default_factory=list)
    empty: list[str] = field(default_factory=list)
    not_configured: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    timed_out: list[str] = field(default_factory=list)
    skipped: bool = False
    incomplete: bool = False


def is_summary_due(
    summary_time: str | None,
    now: datetime,
    last_summary_date: date | None,
    *,
    default_time: str = DEFAULT_SUMMARY_TIME,
) -> bool:
    """Return ``True`` when today's digest should be produced at ``now``.

    A user is due once per local day, at or after their summary time. A
    pass that runs late still delivers, which also catches up after downtime.
    """

    local_now = ensure_app_timezone(now)
    if last_summary_date is not None and local_now.date() <= last_summary_date:
        return False
    scheduled = parse_summary_time(summary_time) or parse_summary_time(default_time)
    if scheduled is None:
        scheduled = parse_summary_time(DEFAULT_SUMMARY_TIME)
    return local_now.time() >= scheduled


class SummaryScheduler:
    """Periodically summarize every due subscriber.

    Each user is claimed in the delivery ledger before composing, so a digest
    goes out at most once per user and local day even with several API
    workers running the loop.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        publisher: NotificationPublisher | None = None,
        composer: Composer = compose_summary,
        tick_seconds: float = 60.0,
        pass_timeout_seconds: float = 55.0,
        user_timeout_seconds: float = 15.0,
        source_retries: int = 1,
        default_summary_time: str = DEFAULT_SUMMARY_TIME,
        availability_check: Callable[[], bool] = is_database_available,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._session_factory = session_factory
        self._publisher = publisher
        self._composer = composer
        self.tick_seconds = tick_seconds
        self.pass_timeout_seconds = pass_timeout_seconds
        self.user_timeout_seconds = user_timeout_seconds
        self.source_retries = source_retries
        self.default_summary_time = default_summary_time
        self._availability_check = availability_check
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None
        self._late_deliveries: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Launch the loop on the running event loop."""

        if self.running:
            logger.warning("Summary scheduler is already running")
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(
            self._run_forever(), name="summary-scheduler"
        )
        logger.info("Summary scheduler started, ticking every %ss", self.tick_seconds)

    async def stop(self) -> None:
        if self._task is not None:
            if self._stop_event is not None:
                self._stop_event.set()
            try:
                await asyncio.wait_for(self._task, timeout=self.pass_timeout_seconds)
            except asyncio.TimeoutError:
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
            self._task = None
            logger.info("Summary scheduler stopped")
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self.drain(), timeout=self.pass_timeout_seconds)

    async def drain(self) -> None:
        """Wait until digests that outlived their deadline are recorded."""

        if self._late_deliveries:
            await asyncio.wait(set(self._late_deliveries))

    async def _run_forever(self) -> None:
        assert self._stop_event is not None
        while not self._stop_event.is_set():
            try:
                await self.run_pass()
            except Exception:
                logger.exception("Summary scheduler pass failed")
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.tick_seconds)

    async def run_pass(self, now: datetime | None = None) -> SummaryPassReport:
        """Deliver digests to every user due at ``now``."""

        current = ensure_app_timezone(now) if now is not None else self._clock()
        report = SummaryPassReport(started_at=current)

        if not await asyncio.to_thread(self._availability_check):
            logger.warning("Database unavailable, skipping summary pass")
            report.skipped = True
            return report

        try:
            await asyncio.wait_for(
                self._deliver_due(current, report), timeout=self.pass_timeout_seconds
            )
        except asyncio.TimeoutError:
            report.incomplete = True
            logger.warning(
                "Summary pass exceeded %ss; remaining users wait for the next tick",
                self.pass_timeout_seconds,
            )

        if report.due:
            logger.info(
                "Summary pass finished: %s due, %s sent, %s empty, %s failed, %s timed out",
                report.due,
                len(report.sent),
                len(report.empty),
                len(report.failed),
                len(report.timed_out),
            )
        return report

    async def _deliver_due(self, now: datetime, report: SummaryPassReport) -> None:
        subscribers, last_dates = await asyncio.to_thread(self._load_subscribers)
        report.considered = len(subscribers)
        for username, summary_time in subscribers:
            if not is_summary_due(
                summary_time,
                now,
                last_dates.get(username),
                default_time=self.default_summary_time,
            ):
                continue
            report.due += 1
            try:
                await self._deliver(username, now, report)
            except Exception:
                logger.exception("Summary bookkeeping for %s failed", username)
                report.failed.append(username)

    async def _deliver(self, username: str, now: datetime, report: SummaryPassReport) -> None:
        today = now.date()
        claimed = await asyncio.to_thread(
            self._with_ledger, lambda ledger: ledger.claim(username, today)
        )
        if not claimed:
            logger.debug("Summary for %s on %s already claimed", username, today)
            return

        # The worker thread cannot be interrupted, so the task outlives any
        # deadline below and is followed up by _finish_late.
        compose = asyncio.ensure_future(asyncio.to_thread(self._compose, username, now))
        try:
            outcome = await asyncio.wait_for(
                asyncio.shield(compose), timeout=self.user_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Summary for %s did not finish within %ss",
                username,
                self.user_timeout_seconds,
            )
            try:
                await self._settle(username, today, SUMMARY_DELIVERY_TIMEOUT)
            finally:
                self._follow_up(compose, username, today, claim_settled=True)
            report.timed_out.append(username)
            return
        except asyncio.CancelledError:
            # Pass deadline hit mid-compose; the claim is still pending.
            self._follow_up(compose, username, today, claim_settled=False)
            raise
        except Exception:
            logger.exception("Summary for %s failed, retrying on the next pass", username)
            await self._release(username, today)
            report.failed.append(username)
            return

        status = await self._record(username, today, outcome)
        if status == SUMMARY_DELIVERY_SENT:
            report.sent.append(username)
        elif status == SUMMARY_DELIVERY_EMPTY:
            report.empty.append(username)
        else:
            report.not_configured.append(username)

    async def _record(self, username: str, today: date, outcome: SummaryOutcome) -> str:
        """Push a created digest and settle the ledger; return the status written."""

        if outcome.status is SummaryStatus.CREATED:
            if self._publisher is not None and outcome.notification is not None:
                self._publisher.dispatch(outcome.notification)
            status = SUMMARY_DELIVERY_SENT
        elif outcome.status is SummaryStatus.NOTHING_TO_REPORT:
            status = SUMMARY_DELIVERY_EMPTY
        else:
            status = SUMMARY_DELIVERY_NOT_CONFIGURED
        await self._settle(username, today, status)
        return status

    def _follow_up(
        self,
        compose: asyncio.Future,
        username: str,
        today: date,
        *,
        claim_settled: bool,
    ) -> None:
        task = asyncio.get_running_loop().create_task(
            self._finish_late(compose, username, today, claim_settled=claim_settled)
        )
        self._late_deliveries.add(task)
        task.add_done_callback(self._late_deliveries.discard)

    async def _finish_late(
        self,
        compose: asyncio.Future,
        username: str,
        today: date,
        *,
        claim_settled: bool,
    ) -> None:
        """Record a digest that finished after its deadline.

        A timed-out claim is only upgraded when a digest was actually stored,
        so the record still gets its push. A claim left pending by an aborted
        pass is settled like any other outcome, or released on failure.
        """

        try:
            outcome = await compose
        except Exception:
            logger.exception("Summary for %s failed after its deadline", username)
            if not claim_settled:
                await self._release(username, today)
            return
        if claim_settled and outcome.status is not SummaryStatus.CREATED:
            return
        status = await self._record(username, today, outcome)
        logger.info("Summary for %s finished after its deadline: %s", username, status)

    async def _release(self, username: str, summary_date: date) -> None:
        await asyncio.to_thread(
            self._with_ledger, lambda ledger: ledger.release(username, summary_date)
        )

    async def _settle(self, username: str, summary_date: date, status: str) -> None:
        await asyncio.to_thread(
            self._with_ledger, lambda ledger: ledger.mark(username, summary_date, status)
        )

    def _load_subscribers(self) -> tuple[list[tuple[str, str | None]], dict[str, date]]:
        session = self._session_factory()
        try:
            subscribers = UserRepository(session).list_summary_subscribers()
            last_dates = SummaryDeliveryRepository(session).get_last_dates(
                [username for username, _ in subscribers]
            )
            return subscribers, last_dates
        finally:
            session.close()

    def _compose(self, username: str, now: datetime) -> SummaryOutcome:
        session = self._session_factory()
        try:
            return self._composer(
                session, username, now=now, source_retries=self.source_retries
            )
        finally:
            session.close()

    def _with_ledger(self, operation: Callable[[SummaryDeliveryRepository], T]) -> T:
        session = self._session_factory()
        try:
            return operation(SummaryDeliveryRepository(session))
        finally:
            session.close()


def build_summary_scheduler(
    settings: Settings | None = None,
    *,
    publisher: NotificationPublisher | None = None,
) -> SummaryScheduler:
    """Create a scheduler wired to the application database and publisher."""

    settings = settings or get_settings()
    return SummaryScheduler(
        SessionLocal,
        publisher=publisher or notification_publisher,
        tick_seconds=settings.summary_tick_seconds,
        pass_timeout_seconds=settings.summary_pass_timeout_seconds,
        user_timeout_seconds=settings.summary_user_timeout_seconds,
        source_retries=settings.summary_source_retries,
        default_summary_time=settings.default_summary_time,
    )


__all__ = [
    "SummaryPassReport",
    "SummaryScheduler",
    "build_summary_scheduler",
    "is_summary_due",
]
