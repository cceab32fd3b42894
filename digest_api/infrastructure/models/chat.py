"""SQLAlchemy models for direct message chats."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from digest_api.infrastructure.database import Base
from digest_api.utils import now_in_app_naive_datetime

MESSAGE_TYPE_DIRECT = "direct"


class ChatModel(Base):
    """Conversation between two users."""

    __tablename__ = "chat"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )

    participants = relationship(
        "ChatParticipantModel", back_populates="chat", cascade="all, delete-orphan"
    )
    deletions = relationship(
        "ChatDeletionModel", back_populates="chat", cascade="all, delete-orphan"
    )
    messages = relationship(
        "MessageModel", back_populates="chat", cascade="all, delete-orphan"
    )


class ChatParticipantModel(Base):
    __tablename__ = "chat_participant"

    chat_id = Column(
        Integer, ForeignKey("chat.id", ondelete="CASCADE"), primary_key=True
    )
    username = Column(String(50), primary_key=True, index=True)

    chat = relationship("ChatModel", back_populates="participants")


class ChatDeletionModel(Base):
    """Soft deletion of a chat by one of its participants."""

    __tablename__ = "chat_deletion"

    chat_id = Column(
        Integer, ForeignKey("chat.id", ondelete="CASCADE"), primary_key=True
    )
    username = Column(String(50), primary_key=True)
    deleted_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    chat = relationship("ChatModel", back_populates="deletions")


class MessageModel(Base):
    __tablename__ = "message"
    __table_args__ = (Index("ix_message_chat_sender_sent", "chat_id", "msg_from", "sent_at"),)

    id = Column(Integer, primary_key=True, index=True)
    chat_id = Column(Integer, ForeignKey("chat.id", ondelete="CASCADE"), nullable=True)
    msg_from = Column(String(50), nullable=False)
    msg_type = Column(String(20), nullable=False, default=MESSAGE_TYPE_DIRECT)
    text = Column(Text, nullable=False, default="")
    sent_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    chat = relationship("ChatModel", back_populates="messages")


__all__ = [
    "MESSAGE_TYPE_DIRECT",
    "ChatDeletionModel",
    "ChatModel",
    "ChatParticipantModel",
    "MessageModel",
]
