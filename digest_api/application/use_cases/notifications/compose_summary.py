"""Build and persist a user's digest notification."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from digest_api.config import get_settings
from digest_api.domain.entities import (
    NOTIFICATION_TYPE_SUMMARY,
    CommunityQuestionSummary,
    DirectMessageSummary,
    JobFairSummary,
    Notification,
    SummaryOutcome,
    SummaryStatus,
)
from digest_api.infrastructure.repositories import NotificationRepository, UserRepository
from digest_api.utils import ensure_app_timezone, isoformat_or_none, now_in_app_timezone

from .aggregators import ActivitySnapshot, SummarySources, aggregate_activity
from .errors import SummaryPersistenceError, SummarySourceUnavailableError
from .summary_window import resolve_since

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUMMARY_TITLE = "Daily Notification Summary"
SUMMARY_PREFIX = "Summary: "


def _pluralize(count: int, noun: str) -> str:
    return noun if count == 1 else f"{noun}s"


def build_summary_clauses(
    direct_messages: DirectMessageSummary,
    job_fairs: JobFairSummary,
    community_questions: CommunityQuestionSummary,
) -> list[str]:
    """Return the digest clauses in display order, skipping zero counts."""

    clauses: list[str] = []
    if direct_messages.count:
        count = direct_messages.count
        clauses.append(f"{count} new DM {_pluralize(count, 'message')}")
    if job_fairs.updates:
        count = job_fairs.updates
        clauses.append(f"{count} job fair {_pluralize(count, 'update')}")
    if job_fairs.starting_soon:
        count = job_fairs.starting_soon
        clauses.append(f"{count} {_pluralize(count, 'job fair')} starting soon")
    if job_fairs.ended:
        count = job_fairs.ended
        clauses.append(f"{count} {_pluralize(count, 'job fair')} just ended")
    if community_questions.count:
        count = community_questions.count
        per_community = ", ".join(
            f"{item.community_name}: {item.count}"
            for item in community_questions.communities
        )
        clauses.append(
            f"{count} new {_pluralize(count, 'question')} in followed communities"
            f" ({per_community})"
        )
    return clauses


def build_summary_message(clauses: list[str]) -> str:
    return SUMMARY_PREFIX + "; ".join(clauses)


def build_summary_payload(since: datetime, activity: ActivitySnapshot) -> dict:
    """Structured counts stored next to the rendered message."""

    communities: dict[str, int] = {}
    for item in activity.community_questions.communities:
        communities[item.community_name] = communities.get(item.community_name, 0) + item.count
    return {
        "since": isoformat_or_none(since),
        "counts": {
            "dm_messages": activity.direct_messages.count,
            "job_fair_updates": activity.job_fairs.updates,
            "job_fairs_starting_soon": activity.job_fairs.starting_soon,
            "job_fairs_ended": activity.job_fairs.ended,
            "community_questions": activity.community_questions.count,
        },
        "communities": communities,
    }


def compose_summary(
    session: Session,
    username: str,
    *,
    now: datetime | None = None,
    source_retries: int | None = None,
) -> SummaryOutcome:
    """Summarize activity for ``username`` and store it as a notification.

    Returns ``NOT_CONFIGURED`` for unknown users or users that do not receive
    digests, and ``NOTHING_TO_REPORT`` without writing anything when every
    category is empty. Storage failures while reading raise
    :class:`SummarySourceUnavailableError` once the retries are exhausted; a
    failed write raises :class:`SummaryPersistenceError`.
    """

    user = UserRepository(session).get_by_username(username)
    if user is None or not user.preferences.wants_summary():
        return SummaryOutcome(status=SummaryStatus.NOT_CONFIGURED)

    preferences = user.preferences
    current = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    since = resolve_since(preferences, user.last_login, now=current)

    if source_retries is None:
        source_retries = get_settings().summary_source_retries
    sources = SummarySources.from_session(session)
    activity = _with_source_retries(
        session,
        lambda: aggregate_activity(
            sources, username, preferences, since=since, now=current
        ),
        attempts=source_retries + 1,
    )

    clauses = build_summary_clauses(
        activity.direct_messages, activity.job_fairs, activity.community_questions
    )
    if not clauses:
        logger.debug("No new activity for %s since %s", username, since.isoformat())
        return SummaryOutcome(status=SummaryStatus.NOTHING_TO_REPORT, since=since)

    notification = Notification(
        id=None,
        recipient=username,
        type=NOTIFICATION_TYPE_SUMMARY,
        title=SUMMARY_TITLE,
        message=build_summary_message(clauses),
        payload=build_summary_payload(since, activity),
        created_at=current,
    )
    try:
        saved = NotificationRepository(session).create(notification)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SummaryPersistenceError(
            f"Could not store the summary notification for {username}"
        ) from exc

    logger.info("Created summary notification %s for %s", saved.id, username)
    return SummaryOutcome(status=SummaryStatus.CREATED, notification=saved, since=since)


def _with_source_retries(
    session: Session, operation: Callable[[], T], *, attempts: int
) -> T:
    attempt = 1
    while True:
        try:
            return operation()
        except SummarySourceUnavailableError as exc:
            session.rollback()
            if attempt >= attempts:
                raise
            logger.warning(
                "Activity source %s unavailable (attempt %s of %s), retrying",
                exc.source,
                attempt,
                attempts,
            )
            attempt += 1


__all__ = [
    "SUMMARY_PREFIX",
    "SUMMARY_TITLE",
    "build_summary_clauses",
    "build_summary_message",
    "build_summary_payload",
    "compose_summary",
]
