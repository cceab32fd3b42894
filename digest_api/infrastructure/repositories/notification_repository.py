"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from digest_api.domain.entities import Notification
from digest_api.infrastructure.models import NotificationModel
from digest_api.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide storage operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_user(
        self,
        recipient: str,
        *,
        unread_only: bool = False,
        limit: int | None = 100,
    ) -> Sequence[Notification]:
        query = self.session.query(NotificationModel)
        query = query.filter(NotificationModel.recipient == recipient)
        if unread_only:
            query = query.filter(NotificationModel.read.is_(False))
        query = query.order_by(
            NotificationModel.created_at.desc(), NotificationModel.id.desc()
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def list_unread_for_user(
        self, recipient: str, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        return self.list_for_user(recipient, unread_only=True, limit=limit)

    def count_unread(self, recipient: str) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient == recipient)
            .filter(NotificationModel.read.is_(False))
            .count()
        )

    def get_for_recipient(
        self, notification_id: int, *, recipient: str
    ) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == notification_id)
            .filter(NotificationModel.recipient == recipient)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_by_type_since(
        self, recipient: str, notification_type: str, since: datetime
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient == recipient)
            .filter(NotificationModel.type == notification_type)
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def mark_as_read(self, notification_ids: Iterable[int], *, recipient: str) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        updated = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.recipient == recipient,
            )
            .update(
                {
                    NotificationModel.read: True,
                    NotificationModel.updated_at: ensure_app_naive_datetime(
                        now_in_app_timezone()
                    ),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    def mark_all_as_read(self, recipient: str) -> int:
        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient == recipient)
            .filter(NotificationModel.read.is_(False))
            .update({NotificationModel.read: True}, synchronize_session=False)
        )
        self.session.commit()
        return updated

    def clear_for_user(self, recipient: str) -> int:
        deleted = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient == recipient)
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.created_at = created_at
        model.updated_at = created_at
        model.recipient = notification.recipient
        model.type = notification.type
        model.title = notification.title
        model.message = notification.message
        model.read = notification.read
        model.related_id = notification.related_id
        model.payload = notification.payload or {}

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient=model.recipient,
            type=model.type,
            title=model.title,
            message=model.message,
            read=bool(model.read),
            related_id=model.related_id or None,
            payload=model.payload or {},
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationRepository"]
