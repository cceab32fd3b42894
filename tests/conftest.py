"""Shared fixtures: a throwaway SQLite database and seeding helpers."""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="digest-api-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["SUMMARY_SCHEDULER_ENABLED"] = "false"

from digest_api.infrastructure import database  # noqa: E402
from digest_api.infrastructure.models import (  # noqa: E402
    ChatDeletionModel,
    ChatModel,
    ChatParticipantModel,
    CommunityModel,
    CommunityParticipantModel,
    JobFairModel,
    JobFairParticipantModel,
    MessageModel,
    QuestionModel,
    UserModel,
)
from digest_api.utils import ensure_app_naive_datetime  # noqa: E402

FIXED_NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


class DataFactory:
    """Insert collaborator rows with explicit timestamps."""

    def __init__(self, session) -> None:
        self.session = session

    def _save(self, *models):
        self.session.add_all(models)
        self.session.commit()
        for model in models:
            self.session.refresh(model)
        return models[0]

    def user(
        self,
        username: str,
        *,
        enabled: bool = True,
        summarized: bool = True,
        summary_time: str | None = "09:00",
        dm: bool = True,
        job_fair: bool = True,
        community: bool = True,
        last_login: datetime | None = None,
    ) -> UserModel:
        return self._save(
            UserModel(
                username=username,
                notifications_enabled=enabled,
                notifications_summarized=summarized,
                summary_time=summary_time,
                dm_notifications_enabled=dm,
                job_fair_notifications_enabled=job_fair,
                community_notifications_enabled=community,
                last_login=ensure_app_naive_datetime(last_login),
            )
        )

    def chat(self, *usernames: str) -> ChatModel:
        chat = ChatModel(
            participants=[ChatParticipantModel(username=username) for username in usernames]
        )
        return self._save(chat)

    def message(
        self,
        chat: ChatModel,
        sender: str,
        sent_at: datetime,
        *,
        msg_type: str = "direct",
        text: str = "hello",
    ) -> MessageModel:
        return self._save(
            MessageModel(
                chat_id=chat.id,
                msg_from=sender,
                msg_type=msg_type,
                text=text,
                sent_at=ensure_app_naive_datetime(sent_at),
            )
        )

    def delete_chat(self, chat: ChatModel, username: str) -> ChatDeletionModel:
        return self._save(ChatDeletionModel(chat_id=chat.id, username=username))

    def job_fair(
        self,
        title: str,
        *,
        participants: tuple[str, ...],
        status: str,
        start_time: datetime,
        end_time: datetime,
        created_at: datetime,
        updated_at: datetime | None = None,
        host: str = "recruiter",
    ) -> JobFairModel:
        fair = JobFairModel(
            title=title,
            host_username=host,
            status=status,
            start_time=ensure_app_naive_datetime(start_time),
            end_time=ensure_app_naive_datetime(end_time),
            created_at=ensure_app_naive_datetime(created_at),
            updated_at=ensure_app_naive_datetime(updated_at or created_at),
            participants=[JobFairParticipantModel(username=member) for member in participants],
        )
        return self._save(fair)

    def community(self, name: str | None, *, members: tuple[str, ...]) -> CommunityModel:
        community = CommunityModel(
            name=name,
            participants=[CommunityParticipantModel(username=member) for member in members],
        )
        return self._save(community)

    def question(
        self,
        community: CommunityModel,
        asked_by: str,
        asked_at: datetime,
        *,
        title: str = "How do I prepare?",
    ) -> QuestionModel:
        return self._save(
            QuestionModel(
                community_id=community.id,
                title=title,
                asked_by=asked_by,
                asked_at=ensure_app_naive_datetime(asked_at),
            )
        )


@pytest.fixture(autouse=True)
def setup_database():
    """Start every test from empty tables."""

    from digest_api.infrastructure import models  # noqa: F401

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def factory(session) -> DataFactory:
    return DataFactory(session)


@pytest.fixture()
def now() -> datetime:
    return FIXED_NOW
