"""
Stats Collector - Aggregate counters over conversations and logs.

All figures come from one SELECT of scalar subqueries so the snapshot
is taken in a single round trip.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from simsimi.core.exceptions import StorageFailure
from simsimi.database.connection import DatabaseConnection
from simsimi.database.models import ConversationEntry, InteractionLogEntry


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Aggregate view of the service.

    Attributes:
        total_responses: Conversation entries, active or not
        total_interactions: Interaction log rows
        taught_responses: Log rows flagged is_taught
        last_taught_at: Creation time of the newest conversation entry
        avg_response_time_ms: Mean over log rows with a positive response time
    """
    total_responses: int
    total_interactions: int
    taught_responses: int
    last_taught_at: Optional[datetime]
    avg_response_time_ms: Optional[float]


class StatsCollector:
    def __init__(self, db: DatabaseConnection):
        self.db = db

    def snapshot(self) -> StatsSnapshot:
        """
        Compute the current aggregates.

        last_taught_at is MAX(created_at), so re-teaching an existing
        question does not move it.
        """
        stmt = select(
            select(func.count(ConversationEntry.id))
            .scalar_subquery().label("total_responses"),
            select(func.count(InteractionLogEntry.id))
            .scalar_subquery().label("total_interactions"),
            select(func.count(InteractionLogEntry.id))
            .where(InteractionLogEntry.is_taught.is_(True))
            .scalar_subquery().label("taught_responses"),
            select(func.max(ConversationEntry.created_at))
            .scalar_subquery().label("last_taught_at"),
            select(func.avg(InteractionLogEntry.response_time_ms))
            .where(InteractionLogEntry.response_time_ms > 0)
            .scalar_subquery().label("avg_response_time_ms"),
        )
        try:
            with self.db.get_session() as session:
                row = session.execute(stmt).one()
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to retrieve statistics") from e

        return StatsSnapshot(
            total_responses=row.total_responses or 0,
            total_interactions=row.total_interactions or 0,
            taught_responses=row.taught_responses or 0,
            last_taught_at=row.last_taught_at,
            avg_response_time_ms=(
                float(row.avg_response_time_ms)
                if row.avg_response_time_ms is not None else None
            ),
        )
