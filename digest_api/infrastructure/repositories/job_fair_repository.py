"""Read-only queries over job fairs a user takes part in."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from digest_api.domain.entities import (
    JOB_FAIR_SIGNAL_ENDED,
    JOB_FAIR_SIGNAL_STARTING_SOON,
    JOB_FAIR_SIGNAL_STATUS_CHANGE,
    JOB_FAIR_STATUS_ENDED,
    JOB_FAIR_STATUS_LIVE,
    JOB_FAIR_STATUS_UPCOMING,
    JobFair,
)
from digest_api.infrastructure.models import JobFairModel, JobFairParticipantModel
from digest_api.utils import ensure_app_naive_datetime, ensure_app_timezone

STARTING_SOON_HORIZON = timedelta(hours=24)


class JobFairRepository:
    """Evaluate job fair signals directly in the database."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def count_signal(
        self, username: str, signal: str, *, since: datetime, now: datetime
    ) -> int:
        query = self.session.query(func.count(JobFairModel.id)).select_from(JobFairModel)
        query = self._apply_signal(query, username, signal, since=since, now=now)
        return int(query.scalar() or 0)

    def list_signal(
        self, username: str, signal: str, *, since: datetime, now: datetime
    ) -> list[JobFair]:
        query = self.session.query(JobFairModel)
        query = self._apply_signal(query, username, signal, since=since, now=now)
        query = query.order_by(JobFairModel.start_time, JobFairModel.id)
        return [self._to_entity(model) for model in query.all()]

    def _apply_signal(
        self,
        query: Query,
        username: str,
        signal: str,
        *,
        since: datetime,
        now: datetime,
    ) -> Query:
        return query.join(
            JobFairParticipantModel,
            and_(
                JobFairParticipantModel.job_fair_id == JobFairModel.id,
                JobFairParticipantModel.username == username,
            ),
        ).filter(self._signal_clause(signal, since=since, now=now))

    @staticmethod
    def _signal_clause(signal: str, *, since: datetime, now: datetime) -> ColumnElement[bool]:
        since_value = ensure_app_naive_datetime(since)
        if signal == JOB_FAIR_SIGNAL_STATUS_CHANGE:
            return and_(
                or_(
                    JobFairModel.created_at > since_value,
                    JobFairModel.updated_at > since_value,
                ),
                JobFairModel.status.in_((JOB_FAIR_STATUS_LIVE, JOB_FAIR_STATUS_ENDED)),
            )
        if signal == JOB_FAIR_SIGNAL_STARTING_SOON:
            now_value = ensure_app_naive_datetime(now)
            return and_(
                JobFairModel.status == JOB_FAIR_STATUS_UPCOMING,
                JobFairModel.start_time > now_value,
                JobFairModel.start_time <= now_value + STARTING_SOON_HORIZON,
                JobFairModel.start_time > since_value,
            )
        if signal == JOB_FAIR_SIGNAL_ENDED:
            return and_(
                JobFairModel.status == JOB_FAIR_STATUS_ENDED,
                JobFairModel.end_time > since_value,
            )
        raise ValueError(f"Unknown job fair signal: {signal}")

    @staticmethod
    def _to_entity(model: JobFairModel) -> JobFair:
        return JobFair(
            id=model.id,
            title=model.title or "",
            status=model.status or JOB_FAIR_STATUS_UPCOMING,
            start_time=ensure_app_timezone(model.start_time),
            end_time=ensure_app_timezone(model.end_time),
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["JobFairRepository", "STARTING_SOON_HORIZON"]
