"""Read-only queries over communities and their questions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import and_, func
from sqlalchemy.orm import Query, Session

from digest_api.domain.entities import CommunityQuestion, CommunityQuestionCount
from digest_api.infrastructure.models import (
    CommunityModel,
    CommunityParticipantModel,
    QuestionModel,
)
from digest_api.utils import ensure_app_naive_datetime, ensure_app_timezone


def community_display_name(community_id: int, name: str | None) -> str:
    return name or f"Community {community_id}"


class CommunityRepository:
    """Find questions asked by others in the communities a user joined."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def count_questions_by_community(
        self, username: str, since: datetime
    ) -> list[CommunityQuestionCount]:
        query = (
            self._member_questions(
                username,
                since,
                CommunityModel.id,
                CommunityModel.name,
                func.count(QuestionModel.id),
            )
            .group_by(CommunityModel.id, CommunityModel.name)
            .order_by(CommunityModel.id)
        )
        return [
            CommunityQuestionCount(
                community_id=community_id,
                community_name=community_display_name(community_id, name),
                count=int(count),
            )
            for community_id, name, count in query.all()
        ]

    def list_questions(self, username: str, since: datetime) -> list[CommunityQuestion]:
        query = (
            self._member_questions(
                username,
                since,
                QuestionModel.id,
                QuestionModel.title,
                QuestionModel.asked_by,
                QuestionModel.asked_at,
                CommunityModel.id,
                CommunityModel.name,
            )
            .order_by(CommunityModel.id, QuestionModel.asked_at, QuestionModel.id)
        )
        return [
            CommunityQuestion(
                id=question_id,
                title=title or "",
                asked_by=asked_by or "",
                asked_at=ensure_app_timezone(asked_at),
                community_id=community_id,
                community_name=community_display_name(community_id, name),
            )
            for question_id, title, asked_by, asked_at, community_id, name in query.all()
        ]

    def _member_questions(self, username: str, since: datetime, *entities) -> Query:
        # Deleted communities cascade away, so they never show up here.
        return (
            self.session.query(*entities)
            .select_from(CommunityModel)
            .join(
                CommunityParticipantModel,
                and_(
                    CommunityParticipantModel.community_id == CommunityModel.id,
                    CommunityParticipantModel.username == username,
                ),
            )
            .join(QuestionModel, QuestionModel.community_id == CommunityModel.id)
            .filter(QuestionModel.asked_by != username)
            .filter(QuestionModel.asked_at > ensure_app_naive_datetime(since))
        )


__all__ = ["CommunityRepository", "community_display_name"]
