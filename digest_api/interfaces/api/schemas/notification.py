"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient: str
    type: str
    title: str
    message: str
    read: bool = False
    related_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime | None = None


class NotificationCountRead(BaseModel):
    count: int = Field(..., ge=0, description="Unread notifications for the caller")


class NotificationBulkResult(BaseModel):
    affected: int = Field(..., ge=0, description="Number of notifications changed")


class SummaryResultMessage(BaseModel):
    """Returned instead of a notification when no digest was produced."""

    message: str


class DirectMessageThreadRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    chat_id: int
    other_user: str
    count: int
    is_deleted: bool = False


class QuestionItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    asked_by: str
    asked_at: datetime


class CommunityQuestionsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    community_id: int
    community_name: str
    count: int
    questions: list[QuestionItemRead] = Field(default_factory=list)


class JobFairItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    signals: list[str] = Field(
        default_factory=list,
        description="Conditions the fair matched: status_change, starting_soon, ended",
    )


class SummaryBreakdownRead(BaseModel):
    """Itemized activity behind a digest, keyed by chat and community id."""

    since: datetime
    dm_messages: dict[str, DirectMessageThreadRead] = Field(default_factory=dict)
    community_questions: dict[str, CommunityQuestionsRead] = Field(default_factory=dict)
    job_fairs: list[JobFairItemRead] = Field(default_factory=list)


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
