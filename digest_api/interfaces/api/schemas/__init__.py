from .notification import (
    CommunityQuestionsRead,
    DirectMessageThreadRead,
    JobFairItemRead,
    NotificationBulkResult,
    NotificationCountRead,
    NotificationRead,
    QuestionItemRead,
    SummaryBreakdownRead,
    SummaryResultMessage,
)

__all__ = [
    "CommunityQuestionsRead",
    "DirectMessageThreadRead",
    "JobFairItemRead",
    "NotificationBulkResult",
    "NotificationCountRead",
    "NotificationRead",
    "QuestionItemRead",
    "SummaryBreakdownRead",
    "SummaryResultMessage",
]
