"""
Conversation Service - Business logic for ask and teach.

This service orchestrates the lookup/teach flow:
1. Validates and normalizes the question
2. Reads or writes the response store
3. Records the interaction (best-effort)
4. Returns a result the API layer can render

Search and stats are passed through with input checks.
"""
import random
import time
from dataclasses import dataclass
from typing import List, Optional

from simsimi.core.config import Settings, get_settings
from simsimi.core.exceptions import StorageFailure
from simsimi.core.logging_config import get_logger
from simsimi.core.validators import normalize, require_text, validate_pagination
from simsimi.database.interaction_log import InteractionLogger
from simsimi.database.models import ConversationEntry
from simsimi.database.response_store import ResponseStore
from simsimi.database.stats import StatsCollector, StatsSnapshot

logger = get_logger(__name__)

FALLBACK_RESPONSES = (
    "I don't know how to respond to that yet. Can you teach me?",
    "Hmm, I'm not sure about that one. Want to teach me the answer?",
    "That's a new one for me! What should I say to that?",
    "I'm still learning! Could you teach me how to respond to that?",
    "I don't have an answer for that. Would you like to teach me?",
)


@dataclass
class AskResult:
    """
    Outcome of an ask.

    Attributes:
        question: Question as received
        answer: Taught answer, or a fallback message when nothing matched
        was_taught: True when answer is a taught answer
        teach_count: Teach count of the matched entry (None when not found)
        response_time_ms: Store lookup time
    """
    question: str
    answer: str
    was_taught: bool
    teach_count: Optional[int]
    response_time_ms: int

    @property
    def needs_teaching(self) -> bool:
        return not self.was_taught


@dataclass
class TeachResult:
    entry: ConversationEntry
    response_time_ms: int


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class ConversationService:
    """
    Service for asking and teaching responses.

    Example:
        >>> service = ConversationService(store, interaction_logger, stats)
        >>> service.teach("hello", "Hi there!")
        >>> service.ask("  HELLO  ").answer
        'Hi there!'
    """

    def __init__(
        self,
        store: ResponseStore,
        interaction_logger: InteractionLogger,
        stats_collector: StatsCollector,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the conversation service.

        Args:
            store: Response store
            interaction_logger: Where ask/teach events are recorded
            stats_collector: Aggregate counters
            settings: Settings providing input limits
            rng: Random source for fallback selection
        """
        self.store = store
        self.interaction_logger = interaction_logger
        self.stats_collector = stats_collector
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()

    def find(self, question: str) -> Optional[ConversationEntry]:
        """Active entry whose normalized question matches, if any."""
        return self.store.find(normalize(question))

    def ask(self, question: str, user_agent: str = "", ip_address: str = "") -> AskResult:
        """
        Look up the taught answer for a question.

        A miss is not an error: the result carries a fallback message and
        was_taught=False.

        Raises:
            ValidationError: If the question is missing or blank
            StorageFailure: If the lookup fails
        """
        require_text(question, "question")

        start = time.perf_counter()
        entry = self.find(question)
        response_time_ms = _elapsed_ms(start)

        self._record(
            question,
            entry.answer if entry else None,
            is_taught=entry is not None,
            user_agent=user_agent,
            ip_address=ip_address,
            response_time_ms=response_time_ms,
        )

        if entry is None:
            logger.info(f"No taught answer for: {question[:50]!r}")
            return AskResult(
                question=question,
                answer=self._rng.choice(FALLBACK_RESPONSES),
                was_taught=False,
                teach_count=None,
                response_time_ms=response_time_ms,
            )

        return AskResult(
            question=question,
            answer=entry.answer,
            was_taught=True,
            teach_count=entry.teach_count,
            response_time_ms=response_time_ms,
        )

    def teach(
        self,
        question: str,
        answer: str,
        user_agent: str = "",
        ip_address: str = ""
    ) -> TeachResult:
        """
        Store a question/answer pair, or re-teach an existing question.

        Raises:
            ValidationError: If question or answer is blank or too long
            StorageFailure: If the write fails
        """
        require_text(question, "question", self.settings.max_question_length)
        require_text(answer, "answer", self.settings.max_answer_length)

        start = time.perf_counter()
        entry = self.store.upsert(question, normalize(question), answer)
        response_time_ms = _elapsed_ms(start)

        self._record(
            question,
            answer,
            is_taught=True,
            user_agent=user_agent,
            ip_address=ip_address,
            response_time_ms=response_time_ms,
        )

        logger.info(
            f"Taught response: id={entry.id} teach_count={entry.teach_count} "
            f"question={question[:50]!r}"
        )
        return TeachResult(entry=entry, response_time_ms=response_time_ms)

    def search(self, term: str, limit: int = 10, offset: int = 0) -> List[ConversationEntry]:
        """
        Search active entries by question or answer substring.

        Raises:
            ValidationError: If the term is blank or pagination is invalid
        """
        require_text(term, "search term")
        validate_pagination(limit, offset)
        return self.store.search(normalize(term), limit=limit, offset=offset)

    def stats(self) -> StatsSnapshot:
        return self.stats_collector.snapshot()

    def _record(self, question: str, response: Optional[str], **kwargs) -> None:
        # Logging never blocks or rolls back the primary operation
        try:
            self.interaction_logger.record(question, response, **kwargs)
        except StorageFailure as e:
            logger.warning(f"Failed to record interaction: {e}")
