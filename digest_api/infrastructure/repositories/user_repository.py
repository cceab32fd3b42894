"""Read access to user accounts and their notification preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from digest_api.domain.entities import DEFAULT_SUMMARY_TIME, NotificationPreferences, User
from digest_api.infrastructure.models import UserModel
from digest_api.utils import ensure_app_timezone


class UserRepository:
    """Provide the user queries the digest engine depends on."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_username(self, username: str) -> User | None:
        model = (
            self.session.query(UserModel)
            .filter(UserModel.username == username)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_summary_subscribers(self) -> list[tuple[str, str | None]]:
        """Return ``(username, summary_time)`` for users receiving digests."""

        query = (
            self.session.query(UserModel.username, UserModel.summary_time)
            .filter(UserModel.notifications_enabled.is_(True))
            .filter(UserModel.notifications_summarized.is_(True))
            .order_by(UserModel.username)
        )
        return [(username, summary_time) for username, summary_time in query.all()]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            username=model.username,
            preferences=NotificationPreferences(
                enabled=bool(model.notifications_enabled),
                summarized=bool(model.notifications_summarized),
                summary_time=model.summary_time or DEFAULT_SUMMARY_TIME,
                dm_enabled=bool(model.dm_notifications_enabled),
                job_fair_enabled=bool(model.job_fair_notifications_enabled),
                community_enabled=bool(model.community_notifications_enabled),
            ),
            last_login=ensure_app_timezone(model.last_login),
        )


__all__ = ["UserRepository"]
