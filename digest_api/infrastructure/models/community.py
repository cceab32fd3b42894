"""SQLAlchemy models for communities and the questions asked in them."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from digest_api.infrastructure.database import Base
from digest_api.utils import now_in_app_naive_datetime


class CommunityModel(Base):
    __tablename__ = "community"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=True)

    participants = relationship(
        "CommunityParticipantModel",
        back_populates="community",
        cascade="all, delete-orphan",
    )
    questions = relationship(
        "QuestionModel", back_populates="community", cascade="all, delete-orphan"
    )


class CommunityParticipantModel(Base):
    __tablename__ = "community_participant"

    community_id = Column(
        Integer, ForeignKey("community.id", ondelete="CASCADE"), primary_key=True
    )
    username = Column(String(50), primary_key=True, index=True)

    community = relationship("CommunityModel", back_populates="participants")


class QuestionModel(Base):
    __tablename__ = "question"
    __table_args__ = (Index("ix_question_community_asked", "community_id", "asked_at"),)

    id = Column(Integer, primary_key=True, index=True)
    community_id = Column(
        Integer, ForeignKey("community.id", ondelete="CASCADE"), nullable=True
    )
    title = Column(String(300), nullable=False, default="")
    asked_by = Column(String(50), nullable=False)
    asked_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    community = relationship("CommunityModel", back_populates="questions")


__all__ = ["CommunityModel", "CommunityParticipantModel", "QuestionModel"]
