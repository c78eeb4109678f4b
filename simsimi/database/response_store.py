"""
Response Store - Durable mapping from normalized question to taught answer.

The store supports three access paths:
- Point lookup by normalized key (active entries only)
- Atomic upsert by normalized key
- Substring scan for search

Upsert is a single conditional write ("insert ... on conflict update"),
never a lookup followed by a write, so concurrent teaches of the same
question cannot lose a teach_count increment.
"""
from typing import List, Optional

from sqlalchemy import case, func, or_, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from simsimi.core.exceptions import StorageFailure
from simsimi.core.logging_config import get_logger
from simsimi.database.connection import DatabaseConnection
from simsimi.database.models import ConversationEntry, utcnow

logger = get_logger(__name__)

_RETURNING_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class ResponseStore:
    """
    Repository for ConversationEntry rows.

    Callers pass keys that are already normalized; normalization belongs
    to the service layer.

    Example:
        >>> store = ResponseStore(db)
        >>> entry = store.upsert("Hello", "hello", "Hi there!")
        >>> store.find("hello").teach_count
        1
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def find(self, normalized_question: str) -> Optional[ConversationEntry]:
        """
        Look up the active entry for a normalized question.

        Returns:
            The entry, or None when nothing active matches
        """
        stmt = (
            select(ConversationEntry)
            .where(
                ConversationEntry.normalized_question == normalized_question,
                ConversationEntry.is_active.is_(True),
            )
            .limit(1)
        )
        try:
            with self.db.get_session() as session:
                return session.scalars(stmt).first()
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to look up response") from e

    def upsert(self, question: str, normalized_question: str, answer: str) -> ConversationEntry:
        """
        Insert a new entry or re-teach an existing one in one statement.

        On conflict the answer is replaced, teach_count incremented and
        updated_at refreshed. A conflicting inactive entry is reactivated
        with teach_count reset to 1 and the new question text, as if it
        were created fresh.

        Returns:
            The entry as stored after the write
        """
        try:
            with self.db.get_session() as session:
                if self.db.dialect == "mysql":
                    entry = self._upsert_mysql(session, question, normalized_question, answer)
                else:
                    entry = self._upsert_returning(session, question, normalized_question, answer)
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to save the response") from e

        logger.debug(
            f"Upserted response: id={entry.id} key={normalized_question[:50]!r} "
            f"teach_count={entry.teach_count}"
        )
        return entry

    def _values(self, question: str, normalized_question: str, answer: str) -> dict:
        now = utcnow()
        return {
            "question": question,
            "normalized_question": normalized_question,
            "answer": answer,
            "teach_count": 1,
            "is_active": True,
            "created_at": now,
            "updated_at": now,
        }

    def _upsert_returning(
        self,
        session: Session,
        question: str,
        normalized_question: str,
        answer: str
    ) -> ConversationEntry:
        try:
            insert = _RETURNING_INSERTS[self.db.dialect]
        except KeyError:
            raise StorageFailure(f"Unsupported database dialect: {self.db.dialect}")

        stmt = insert(ConversationEntry).values(
            **self._values(question, normalized_question, answer)
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["normalized_question"],
            set_={
                "question": case(
                    (ConversationEntry.is_active, ConversationEntry.question),
                    else_=stmt.excluded.question,
                ),
                "answer": stmt.excluded.answer,
                "teach_count": case(
                    (ConversationEntry.is_active, ConversationEntry.teach_count + 1),
                    else_=1,
                ),
                "is_active": True,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        return session.scalars(
            stmt.returning(ConversationEntry),
            execution_options={"populate_existing": True},
        ).one()

    def _upsert_mysql(
        self,
        session: Session,
        question: str,
        normalized_question: str,
        answer: str
    ) -> ConversationEntry:
        # MySQL applies assignments left to right, so is_active must come last.
        stmt = mysql.insert(ConversationEntry).values(
            **self._values(question, normalized_question, answer)
        )
        stmt = stmt.on_duplicate_key_update([
            ("question", case(
                (ConversationEntry.is_active, ConversationEntry.question),
                else_=stmt.inserted.question,
            )),
            ("teach_count", case(
                (ConversationEntry.is_active, ConversationEntry.teach_count + 1),
                else_=1,
            )),
            ("answer", stmt.inserted.answer),
            ("updated_at", stmt.inserted.updated_at),
            ("is_active", True),
        ])
        session.execute(stmt)
        # The row is locked by this transaction until commit
        return session.scalars(
            select(ConversationEntry).where(
                ConversationEntry.normalized_question == normalized_question
            ),
            execution_options={"populate_existing": True},
        ).one()

    def search(self, term: str, limit: int = 10, offset: int = 0) -> List[ConversationEntry]:
        """
        Find active entries whose question or answer contains term.

        Matching is a case-insensitive literal substring match; LIKE
        wildcards in term are escaped. Results are ordered by teach_count
        descending, then insertion order.

        Args:
            term: Normalized (lower-cased, trimmed) search term
            limit: Page size
            offset: Rows to skip

        Returns:
            Matching entries, possibly empty
        """
        stmt = (
            select(ConversationEntry)
            .where(
                ConversationEntry.is_active.is_(True),
                or_(
                    ConversationEntry.normalized_question.contains(term, autoescape=True),
                    func.lower(ConversationEntry.answer).contains(term, autoescape=True),
                ),
            )
            .order_by(ConversationEntry.teach_count.desc(), ConversationEntry.id.asc())
            .limit(limit)
            .offset(offset)
        )
        try:
            with self.db.get_session() as session:
                return list(session.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise StorageFailure("Failed to search responses") from e
