"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.sql import expression

from digest_api.infrastructure.database import Base


class UserModel(Base):
    """Account columns read by the digest engine.

    The account service owns this table; only the username, the notification
    preferences and the last login are mapped here.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    notifications_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    notifications_summarized = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    summary_time = Column(String(5), nullable=True, default="09:00")
    dm_notifications_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    job_fair_notifications_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    community_notifications_enabled = Column(
        Boolean, nullable=False, default=True, server_default=expression.true()
    )
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["UserModel"]
