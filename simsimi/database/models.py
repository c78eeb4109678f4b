"""
Database Models - SQLAlchemy ORM models for persistent storage.

This module defines the database schema for:
- Taught conversations (question -> answer)
- Interaction logs (one row per ask/teach)
"""
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ConversationEntry(Base):
    """
    A taught question/answer pair.

    normalized_question is the lookup key and is unique across the table,
    so there is never more than one entry per key.
    """
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(String(500), nullable=False)
    normalized_question = Column(String(500), nullable=False, unique=True, index=True)
    answer = Column(Text, nullable=False)
    teach_count = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<ConversationEntry id={self.id} "
            f"question={self.normalized_question!r} teach_count={self.teach_count}>"
        )


class InteractionLogEntry(Base):
    """
    Append-only record of an ask or teach call.

    response is NULL when an ask found no taught answer.
    """
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question = Column(Text, nullable=False)
    normalized_question = Column(Text, nullable=False)
    response = Column(Text, nullable=True)
    is_taught = Column(Boolean, default=False, nullable=False, index=True)
    response_time_ms = Column(Integer, default=0, nullable=False)
    user_agent = Column(String(512), default="", nullable=False)
    ip_address = Column(String(64), default="", nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
