"""Domain objects produced while summarizing a user's recent activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .activity import CommunityQuestionCount, DirectMessageCount
from .notification import Notification

JOB_FAIR_SIGNAL_STATUS_CHANGE = "status_change"
JOB_FAIR_SIGNAL_STARTING_SOON = "starting_soon"
JOB_FAIR_SIGNAL_ENDED = "ended"

JOB_FAIR_SIGNALS = (
    JOB_FAIR_SIGNAL_STATUS_CHANGE,
    JOB_FAIR_SIGNAL_STARTING_SOON,
    JOB_FAIR_SIGNAL_ENDED,
)

SUMMARY_DELIVERY_PENDING = "pending"
SUMMARY_DELIVERY_SENT = "sent"
SUMMARY_DELIVERY_EMPTY = "empty"
SUMMARY_DELIVERY_NOT_CONFIGURED = "not_configured"
SUMMARY_DELIVERY_TIMEOUT = "timeout"


@dataclass
class DirectMessageSummary:
    count: int = 0
    chats: list[DirectMessageCount] = field(default_factory=list)


@dataclass
class JobFairSummary:
    """Counts for the three independent job fair signals."""

    updates: int = 0
    starting_soon: int = 0
    ended: int = 0

    @property
    def total(self) -> int:
        return self.updates + self.starting_soon + self.ended


@dataclass
class CommunityQuestionSummary:
    count: int = 0
    communities: list[CommunityQuestionCount] = field(default_factory=list)


class SummaryStatus(str, Enum):
    """Result of a summarization run; none of these are failures."""

    CREATED = "created"
    NOT_CONFIGURED = "not_configured"
    NOTHING_TO_REPORT = "nothing_to_report"


@dataclass
class SummaryOutcome:
    status: SummaryStatus
    notification: Notification | None = None
    since: datetime | None = None

    @property
    def created(self) -> bool:
        return self.status is SummaryStatus.CREATED


@dataclass
class DirectMessageThread:
    """Chat contributing messages to a digest."""

    chat_id: int
    other_user: str
    count: int
    is_deleted: bool = False


@dataclass
class QuestionItem:
    id: int
    title: str
    asked_by: str
    asked_at: datetime


@dataclass
class CommunityQuestions:
    community_id: int
    community_name: str
    count: int
    questions: list[QuestionItem] = field(default_factory=list)


@dataclass
class JobFairItem:
    id: int
    title: str
    status: str
    start_time: datetime | None
    end_time: datetime | None
    signals: list[str] = field(default_factory=list)


@dataclass
class SummaryBreakdown:
    """Itemized view of everything a digest counted."""

    since: datetime
    dm_messages: list[DirectMessageThread] = field(default_factory=list)
    community_questions: list[CommunityQuestions] = field(default_factory=list)
    job_fairs: list[JobFairItem] = field(default_factory=list)


__all__ = [
    "JOB_FAIR_SIGNALS",
    "JOB_FAIR_SIGNAL_ENDED",
    "JOB_FAIR_SIGNAL_STARTING_SOON",
    "JOB_FAIR_SIGNAL_STATUS_CHANGE",
    "SUMMARY_DELIVERY_EMPTY",
    "SUMMARY_DELIVERY_NOT_CONFIGURED",
    "SUMMARY_DELIVERY_PENDING",
    "SUMMARY_DELIVERY_SENT",
    "SUMMARY_DELIVERY_TIMEOUT",
    "CommunityQuestionSummary",
    "CommunityQuestions",
    "DirectMessageSummary",
    "DirectMessageThread",
    "JobFairItem",
    "JobFairSummary",
    "QuestionItem",
    "SummaryBreakdown",
    "SummaryOutcome",
    "SummaryStatus",
]
