"""ORM models used by the application infrastructure."""

from .chat import (
    MESSAGE_TYPE_DIRECT,
    ChatDeletionModel,
    ChatModel,
    ChatParticipantModel,
    MessageModel,
)
from .community import CommunityModel, CommunityParticipantModel, QuestionModel
from .job_fair import JobFairModel, JobFairParticipantModel
from .notification import NotificationModel
from .summary_delivery import SummaryDeliveryModel
from .user import UserModel

__all__ = [
    "MESSAGE_TYPE_DIRECT",
    "ChatDeletionModel",
    "ChatModel",
    "ChatParticipantModel",
    "MessageModel",
    "CommunityModel",
    "CommunityParticipantModel",
    "QuestionModel",
    "JobFairModel",
    "JobFairParticipantModel",
    "NotificationModel",
    "SummaryDeliveryModel",
    "UserModel",
]
