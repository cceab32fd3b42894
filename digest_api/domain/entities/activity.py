"""Read-only views over activity owned by other parts of the site."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

JOB_FAIR_STATUS_UPCOMING = "upcoming"
JOB_FAIR_STATUS_LIVE = "live"
JOB_FAIR_STATUS_ENDED = "ended"


@dataclass
class DirectMessageCount:
    """Number of new messages received in one chat."""

    chat_id: int
    other_user: str
    count: int


@dataclass
class CommunityQuestionCount:
    """Number of new questions asked in one community."""

    community_id: int
    community_name: str
    count: int


@dataclass
class JobFair:
    """Job fair attributes used to detect noteworthy changes."""

    id: int
    title: str
    status: str
    start_time: datetime | None
    end_time: datetime | None
    created_at: datetime | None
    updated_at: datetime | None


@dataclass
class CommunityQuestion:
    """A question asked inside a community, with its community context."""

    id: int
    title: str
    asked_by: str
    asked_at: datetime
    community_id: int
    community_name: str


__all__ = [
    "JOB_FAIR_STATUS_ENDED",
    "JOB_FAIR_STATUS_LIVE",
    "JOB_FAIR_STATUS_UPCOMING",
    "CommunityQuestion",
    "CommunityQuestionCount",
    "DirectMessageCount",
    "JobFair",
]
