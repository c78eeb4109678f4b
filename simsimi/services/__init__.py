"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- No SQL (that belongs in database/)
"""
from simsimi.services.conversation_service import (
    AskResult,
    ConversationService,
    FALLBACK_RESPONSES,
    TeachResult,
)

__all__ = [
    "AskResult",
    "ConversationService",
    "FALLBACK_RESPONSES",
    "TeachResult",
]
