"""Domain entities exposed by the application."""

from .activity import (
    JOB_FAIR_STATUS_ENDED,
    JOB_FAIR_STATUS_LIVE,
    JOB_FAIR_STATUS_UPCOMING,
    CommunityQuestion,
    CommunityQuestionCount,
    DirectMessageCount,
    JobFair,
)
from .notification import (
    NOTIFICATION_TYPE_COMMUNITY,
    NOTIFICATION_TYPE_DM,
    NOTIFICATION_TYPE_JOB_FAIR,
    NOTIFICATION_TYPE_SUMMARY,
    Notification,
)
from .summary import (
    JOB_FAIR_SIGNAL_ENDED,
    JOB_FAIR_SIGNAL_STARTING_SOON,
    JOB_FAIR_SIGNAL_STATUS_CHANGE,
    JOB_FAIR_SIGNALS,
    SUMMARY_DELIVERY_EMPTY,
    SUMMARY_DELIVERY_NOT_CONFIGURED,
    SUMMARY_DELIVERY_PENDING,
    SUMMARY_DELIVERY_SENT,
    SUMMARY_DELIVERY_TIMEOUT,
    CommunityQuestionSummary,
    CommunityQuestions,
    DirectMessageSummary,
    DirectMessageThread,
    JobFairItem,
    JobFairSummary,
    QuestionItem,
    SummaryBreakdown,
    SummaryOutcome,
    SummaryStatus,
)
from .user import DEFAULT_SUMMARY_TIME, NotificationPreferences, User

__all__ = [
    "JOB_FAIR_STATUS_ENDED",
    "JOB_FAIR_STATUS_LIVE",
    "JOB_FAIR_STATUS_UPCOMING",
    "CommunityQuestion",
    "CommunityQuestionCount",
    "DirectMessageCount",
    "JobFair",
    "NOTIFICATION_TYPE_COMMUNITY",
    "NOTIFICATION_TYPE_DM",
    "NOTIFICATION_TYPE_JOB_FAIR",
    "NOTIFICATION_TYPE_SUMMARY",
    "Notification",
    "JOB_FAIR_SIGNAL_ENDED",
    "JOB_FAIR_SIGNAL_STARTING_SOON",
    "JOB_FAIR_SIGNAL_STATUS_CHANGE",
    "JOB_FAIR_SIGNALS",
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
    "DEFAULT_SUMMARY_TIME",
    "NotificationPreferences",
    "User",
]
