"""SQLAlchemy models for job fairs and their participants."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from digest_api.infrastructure.database import Base
from digest_api.utils import now_in_app_naive_datetime


class JobFairModel(Base):
    __tablename__ = "job_fair"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    host_username = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="upcoming", index=True)
    start_time = Column(DateTime(), nullable=False)
    end_time = Column(DateTime(), nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )

    participants = relationship(
        "JobFairParticipantModel", back_populates="job_fair", cascade="all, delete-orphan"
    )


class JobFairParticipantModel(Base):
    __tablename__ = "job_fair_participant"

    job_fair_id = Column(
        Integer, ForeignKey("job_fair.id", ondelete="CASCADE"), primary_key=True
    )
    username = Column(String(50), primary_key=True, index=True)

    job_fair = relationship("JobFairModel", back_populates="participants")


__all__ = ["JobFairModel", "JobFairParticipantModel"]
