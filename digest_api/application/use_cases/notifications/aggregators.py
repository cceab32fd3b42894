"""Count new activity per category for a single user."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from digest_api.domain.entities import (
    JOB_FAIR_SIGNAL_ENDED,
    JOB_FAIR_SIGNAL_STARTING_SOON,
    JOB_FAIR_SIGNAL_STATUS_CHANGE,
    CommunityQuestionSummary,
    DirectMessageSummary,
    JobFairSummary,
    NotificationPreferences,
)
from digest_api.infrastructure.repositories import (
    ChatRepository,
    CommunityRepository,
    JobFairRepository,
)

from .errors import SummarySourceUnavailableError

T = TypeVar("T")

SOURCE_DIRECT_MESSAGES = "direct_messages"
SOURCE_JOB_FAIRS = "job_fairs"
SOURCE_COMMUNITIES = "communities"


@dataclass
class SummarySources:
    """Read-only repositories the aggregators query."""

    chats: ChatRepository
    job_fairs: JobFairRepository
    communities: CommunityRepository

    @classmethod
    def from_session(cls, session: Session) -> "SummarySources":
        return cls(
            chats=ChatRepository(session),
            job_fairs=JobFairRepository(session),
            communities=CommunityRepository(session),
        )


@dataclass
class ActivitySnapshot:
    direct_messages: DirectMessageSummary
    job_fairs: JobFairSummary
    community_questions: CommunityQuestionSummary


def read_source(source: str, query: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run ``query`` translating storage failures into a source error."""

    try:
        return query(*args, **kwargs)
    except SQLAlchemyError as exc:
        raise SummarySourceUnavailableError(source) from exc


def aggregate_direct_messages(
    chats: ChatRepository, username: str, since: datetime, *, enabled: bool = True
) -> DirectMessageSummary:
    if not enabled:
        return DirectMessageSummary()
    per_chat = read_source(
        SOURCE_DIRECT_MESSAGES, chats.count_incoming_messages, username, since
    )
    return DirectMessageSummary(count=sum(item.count for item in per_chat), chats=per_chat)


def aggregate_job_fairs(
    job_fairs: JobFairRepository,
    username: str,
    since: datetime,
    *,
    now: datetime,
    enabled: bool = True,
) -> JobFairSummary:
    """Evaluate the status change, starting soon and just ended signals."""

    if not enabled:
        return JobFairSummary()

    def count(signal: str) -> int:
        return read_source(
            SOURCE_JOB_FAIRS,
            job_fairs.count_signal,
            username,
            signal,
            since=since,
            now=now,
        )

    return JobFairSummary(
        updates=count(JOB_FAIR_SIGNAL_STATUS_CHANGE),
        starting_soon=count(JOB_FAIR_SIGNAL_STARTING_SOON),
        ended=count(JOB_FAIR_SIGNAL_ENDED),
    )


def aggregate_community_questions(
    communities: CommunityRepository,
    username: str,
    since: datetime,
    *,
    enabled: bool = True,
) -> CommunityQuestionSummary:
    if not enabled:
        return CommunityQuestionSummary()
    per_community = read_source(
        SOURCE_COMMUNITIES, communities.count_questions_by_community, username, since
    )
    return CommunityQuestionSummary(
        count=sum(item.count for item in per_community),
        communities=per_community,
    )


def aggregate_activity(
    sources: SummarySources,
    username: str,
    preferences: NotificationPreferences,
    *,
    since: datetime,
    now: datetime,
) -> ActivitySnapshot:
    """Run every aggregator against the same ``since`` boundary."""

    return ActivitySnapshot(
        direct_messages=aggregate_direct_messages(
            sources.chats, username, since, enabled=preferences.dm_enabled
        ),
        job_fairs=aggregate_job_fairs(
            sources.job_fairs,
            username,
            since,
            now=now,
            enabled=preferences.job_fair_enabled,
        ),
        community_questions=aggregate_community_questions(
            sources.communities,
            username,
            since,
            enabled=preferences.community_enabled,
        ),
    )


__all__ = [
    "SOURCE_COMMUNITIES",
    "SOURCE_DIRECT_MESSAGES",
    "SOURCE_JOB_FAIRS",
    "ActivitySnapshot",
    "SummarySources",
    "aggregate_activity",
    "aggregate_community_questions",
    "aggregate_direct_messages",
    "aggregate_job_fairs",
    "read_source",
]
