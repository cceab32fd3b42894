"""Read-only queries over direct message chats."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, aliased

from digest_api.domain.entities import DirectMessageCount
from digest_api.infrastructure.models import (
    MESSAGE_TYPE_DIRECT,
    ChatDeletionModel,
    ChatModel,
    ChatParticipantModel,
    MessageModel,
)
from digest_api.utils import ensure_app_naive_datetime


class ChatRepository:
    """Count messages users received from their chat partners."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def count_incoming_messages(
        self, username: str, since: datetime
    ) -> list[DirectMessageCount]:
        """Return per chat counts of direct messages sent to ``username`` after ``since``.

        Only persisted messages authored by the other participant are counted;
        notification records play no part in the result.
        """

        member = aliased(ChatParticipantModel)
        other = aliased(ChatParticipantModel)
        query = (
            self.session.query(
                ChatModel.id,
                other.username,
                func.count(MessageModel.id),
            )
            .select_from(ChatModel)
            .join(member, and_(member.chat_id == ChatModel.id, member.username == username))
            .join(other, and_(other.chat_id == ChatModel.id, other.username != username))
            .join(
                MessageModel,
                and_(
                    MessageModel.chat_id == ChatModel.id,
                    MessageModel.msg_from == other.username,
                ),
            )
            .filter(MessageModel.msg_type == MESSAGE_TYPE_DIRECT)
            .filter(MessageModel.sent_at > ensure_app_naive_datetime(since))
            .group_by(ChatModel.id, other.username)
            .order_by(ChatModel.id, other.username)
        )
        return [
            DirectMessageCount(chat_id=chat_id, other_user=other_user, count=int(count))
            for chat_id, other_user, count in query.all()
        ]

    def list_deleted_chat_ids(self, username: str, chat_ids: Sequence[int]) -> set[int]:
        """Return the subset of ``chat_ids`` that ``username`` has soft-deleted."""

        if not chat_ids:
            return set()
        query = (
            self.session.query(ChatDeletionModel.chat_id)
            .filter(ChatDeletionModel.username == username)
            .filter(ChatDeletionModel.chat_id.in_(set(chat_ids)))
        )
        return {chat_id for (chat_id,) in query.all()}


__all__ = ["ChatRepository"]
