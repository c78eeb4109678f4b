"""
Models module - Pydantic schemas for data validation.

This module defines:
- Request models: Input parsing for API endpoints
- Response models: Output formatting for API responses
"""
from simsimi.models.conversation import (
    TeachRequest,
    ConversationEntryOut,
    SearchResultOut,
    AskResponse,
    TeachResponse,
    SearchResponse,
    StatsResponse,
    HealthResponse,
    ApiInfoResponse,
    ErrorResponse,
)

__all__ = [
    "TeachRequest",
    "ConversationEntryOut",
    "SearchResultOut",
    "AskResponse",
    "TeachResponse",
    "SearchResponse",
    "StatsResponse",
    "HealthResponse",
    "ApiInfoResponse",
    "ErrorResponse",
]
