"""
Interaction Logger - Append-only record of every ask and teach.

Rows are written once and never updated or deleted. They feed the
stats endpoint.
"""
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from simsimi.core.exceptions import StorageFailure
from simsimi.core.logging_config import LoggerMixin
from simsimi.core.validators import normalize
from simsimi.database.connection import DatabaseConnection
from simsimi.database.models import InteractionLogEntry, utcnow


class InteractionLogger(LoggerMixin):
    """Writes InteractionLogEntry rows."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def record(
        self,
        question: str,
        response: Optional[str],
        is_taught: bool = False,
        user_agent: str = "",
        ip_address: str = "",
        response_time_ms: int = 0
    ) -> int:
        """
        Append one interaction.

        Args:
            question: Raw question as received
            response: Answer given, or None when nothing matched
            is_taught: True when the response came from (or was) a taught answer
            user_agent: Client User-Agent header
            ip_address: Client address
            response_time_ms: Store operation time in milliseconds

        Returns:
            Id of the new row

        Raises:
            StorageFailure: If the row could not be written
        """
        entry = InteractionLogEntry(
            question=question,
            normalized_question=normalize(question),
            response=response,
            is_taught=is_taught,
            response_time_ms=response_time_ms,
            user_agent=user_agent or "",
            ip_address=ip_address or "",
            timestamp=utcnow(),
        )
        try:
            with self.db.get_session() as session:
                session.add(entry)
                session.flush()
                entry_id = entry.id
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to record interaction") from e

        self.logger.debug(f"Recorded interaction {entry_id}: taught={is_taught}")
        return entry_id

    def count(self) -> int:
        try:
            with self.db.get_session() as session:
                return session.scalar(select(func.count(InteractionLogEntry.id)))
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to count interactions") from e

    def latest(self, limit: int = 20) -> List[InteractionLogEntry]:
        """Most recent interactions, newest first."""
        stmt = (
            select(InteractionLogEntry)
            .order_by(InteractionLogEntry.id.desc())
            .limit(limit)
        )
        try:
            with self.db.get_session() as session:
                return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to read interactions") from e
