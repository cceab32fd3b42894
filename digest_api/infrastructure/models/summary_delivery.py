"""SQLAlchemy model recording which days a user's digest was attempted."""

from sqlalchemy import Column, Date, DateTime, Integer, String, UniqueConstraint

from digest_api.infrastructure.database import Base
from digest_api.utils import now_in_app_naive_datetime


class SummaryDeliveryModel(Base):
    """One row per user per local day on which a digest run was claimed."""

    __tablename__ = "summary_delivery"
    __table_args__ = (
        UniqueConstraint("username", "summary_date", name="uq_summary_delivery_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, index=True)
    summary_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["SummaryDeliveryModel"]
