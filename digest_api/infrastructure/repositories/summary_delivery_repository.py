"""Ledger of the days on which a user's digest was attempted."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from digest_api.domain.entities import SUMMARY_DELIVERY_PENDING
from digest_api.infrastructure.models import SummaryDeliveryModel


class SummaryDeliveryRepository:
    """Claim and settle per-day digest runs.

    The unique ``(username, summary_date)`` constraint turns :meth:`claim`
    into an atomic test-and-set, so concurrent schedulers cannot both deliver.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_last_dates(self, usernames: Sequence[str]) -> dict[str, date]:
        if not usernames:
            return {}
        query = (
            self.session.query(
                SummaryDeliveryModel.username,
                func.max(SummaryDeliveryModel.summary_date),
            )
            .filter(SummaryDeliveryModel.username.in_(set(usernames)))
            .group_by(SummaryDeliveryModel.username)
        )
        return {username: last_date for username, last_date in query.all() if last_date}

    def get_status(self, username: str, summary_date: date) -> str | None:
        model = self._get_model(username, summary_date)
        return model.status if model else None

    def claim(self, username: str, summary_date: date) -> bool:
        """Reserve ``summary_date`` for ``username``; ``False`` if already taken."""

        model = SummaryDeliveryModel(
            username=username,
            summary_date=summary_date,
            status=SUMMARY_DELIVERY_PENDING,
        )
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return False
        return True

    def mark(self, username: str, summary_date: date, status: str) -> None:
        model = self._get_model(username, summary_date)
        if model is None:
            msg = f"No summary delivery claimed for {username} on {summary_date}"
            raise ValueError(msg)
        model.status = status
        self.session.add(model)
        self.session.commit()

    def release(self, username: str, summary_date: date) -> None:
        """Drop a claim so the next scheduler pass can retry the day."""

        self.session.query(SummaryDeliveryModel).filter(
            SummaryDeliveryModel.username == username,
            SummaryDeliveryModel.summary_date == summary_date,
        ).delete(synchronize_session=False)
        self.session.commit()

    def _get_model(self, username: str, summary_date: date) -> SummaryDeliveryModel | None:
        return (
            self.session.query(SummaryDeliveryModel)
            .filter(SummaryDeliveryModel.username == username)
            .filter(SummaryDeliveryModel.summary_date == summary_date)
            .first()
        )


__all__ = ["SummaryDeliveryRepository"]
