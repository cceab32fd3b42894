"""Repository implementations for infrastructure layer."""

from .chat_repository import ChatRepository
from .community_repository import CommunityRepository
from .job_fair_repository import JobFairRepository
from .notification_repository import NotificationRepository
from .summary_delivery_repository import SummaryDeliveryRepository
from .user_repository import UserRepository

__all__ = [
    "ChatRepository",
    "CommunityRepository",
    "JobFairRepository",
    "NotificationRepository",
    "SummaryDeliveryRepository",
    "UserRepository",
]
