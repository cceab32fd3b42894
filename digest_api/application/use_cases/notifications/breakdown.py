"""Itemize the activity behind a digest notification."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from digest_api.domain.entities import (
    JOB_FAIR_SIGNALS,
    CommunityQuestions,
    DirectMessageThread,
    JobFairItem,
    Notification,
    NotificationPreferences,
    QuestionItem,
    SummaryBreakdown,
    User,
)
from digest_api.infrastructure.repositories import NotificationRepository, UserRepository
from digest_api.utils import ensure_app_timezone, now_in_app_timezone

from .aggregators import (
    SOURCE_COMMUNITIES,
    SOURCE_DIRECT_MESSAGES,
    SOURCE_JOB_FAIRS,
    SummarySources,
    read_source,
)
from .summary_window import resolve_since

logger = logging.getLogger(__name__)


def get_summary_breakdown(
    session: Session,
    username: str,
    since: datetime,
    *,
    now: datetime | None = None,
) -> SummaryBreakdown:
    """Return the itemized activity for ``username`` after ``since``.

    Categories switched off in the user's preferences stay empty, so the
    breakdown lines up with what the digest counted for the same window.
    """

    user = UserRepository(session).get_by_username(username)
    if user is None:
        raise ValueError("User not found")

    preferences = user.preferences
    current = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    window_start = ensure_app_timezone(since)
    sources = SummarySources.from_session(session)

    breakdown = SummaryBreakdown(since=window_start)
    if preferences.dm_enabled:
        breakdown.dm_messages = _direct_message_threads(sources, username, window_start)
    if preferences.community_enabled:
        breakdown.community_questions = _community_questions(
            sources, username, window_start
        )
    if preferences.job_fair_enabled:
        breakdown.job_fairs = _job_fairs(sources, username, window_start, current)
    return breakdown


def get_notification_breakdown(
    session: Session,
    username: str,
    notification_id: int,
    *,
    since: datetime | None = None,
    now: datetime | None = None,
) -> SummaryBreakdown:
    """Expand a stored digest owned by ``username``.

    Raises :class:`ValueError` when the notification does not exist, belongs
    to someone else or is not a digest.
    """

    notification = NotificationRepository(session).get_for_recipient(
        notification_id, recipient=username
    )
    if notification is None or not notification.is_summary():
        raise ValueError("Summary notification not found")

    if since is None:
        user = UserRepository(session).get_by_username(username)
        since = resolve_breakdown_since(notification, user)
    return get_summary_breakdown(session, username, since, now=now)


def resolve_breakdown_since(notification: Notification, user: User | None = None) -> datetime:
    """Return the window a stored digest was computed over.

    Digests record their window start in the payload. Older rows without it
    fall back to the default window anchored at the notification's creation.
    """

    stored = (notification.payload or {}).get("since")
    if isinstance(stored, str):
        try:
            return ensure_app_timezone(datetime.fromisoformat(stored))
        except ValueError:
            logger.warning(
                "Ignoring malformed window start %r on notification %s",
                stored,
                notification.id,
            )

    preferences = user.preferences if user is not None else NotificationPreferences()
    anchor = notification.created_at or now_in_app_timezone()
    return resolve_since(preferences, None, now=anchor)


def _direct_message_threads(
    sources: SummarySources, username: str, since: datetime
) -> list[DirectMessageThread]:
    per_chat = read_source(
        SOURCE_DIRECT_MESSAGES, sources.chats.count_incoming_messages, username, since
    )
    deleted = read_source(
        SOURCE_DIRECT_MESSAGES,
        sources.chats.list_deleted_chat_ids,
        username,
        [item.chat_id for item in per_chat],
    )
    return [
        DirectMessageThread(
            chat_id=item.chat_id,
            other_user=item.other_user,
            count=item.count,
            is_deleted=item.chat_id in deleted,
        )
        for item in per_chat
    ]


def _community_questions(
    sources: SummarySources, username: str, since: datetime
) -> list[CommunityQuestions]:
    questions = read_source(
        SOURCE_COMMUNITIES, sources.communities.list_questions, username, since
    )
    grouped: dict[int, CommunityQuestions] = {}
    for question in questions:
        group = grouped.get(question.community_id)
        if group is None:
            group = CommunityQuestions(
                community_id=question.community_id,
                community_name=question.community_name,
                count=0,
            )
            grouped[question.community_id] = group
        group.questions.append(
            QuestionItem(
                id=question.id,
                title=question.title,
                asked_by=question.asked_by,
                asked_at=question.asked_at,
            )
        )
        group.count += 1
    return list(grouped.values())


def _job_fairs(
    sources: SummarySources, username: str, since: datetime, now: datetime
) -> list[JobFairItem]:
    # A fair matching several signals is listed once with every signal it hit.
    items: dict[int, JobFairItem] = {}
    for signal in JOB_FAIR_SIGNALS:
        fairs = read_source(
            SOURCE_JOB_FAIRS,
            sources.job_fairs.list_signal,
            username,
            signal,
            since=since,
            now=now,
        )
        for fair in fairs:
            item = items.get(fair.id)
            if item is None:
                item = JobFairItem(
                    id=fair.id,
                    title=fair.title,
                    status=fair.status,
                    start_time=fair.start_time,
                    end_time=fair.end_time,
                )
                items[fair.id] = item
            item.signals.append(signal)
    return list(items.values())


__all__ = [
    "get_notification_breakdown",
    "get_summary_breakdown",
    "resolve_breakdown_since",
]
