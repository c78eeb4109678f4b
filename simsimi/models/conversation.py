"""
Request and Response models for the SimSimi API.

These Pydantic models define the contract between client and server.
Length limits are enforced by the service so the configured values
apply; the schema only requires the fields to be present.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TeachRequest(BaseModel):
    """Request body for POST /teach."""
    question: Optional[str] = Field(
        default=None,
        description="The question to teach",
        examples=["hello"]
    )
    answer: Optional[str] = Field(
        default=None,
        description="The answer SimSimi should give",
        examples=["Hello there!"]
    )


class ConversationEntryOut(BaseModel):
    """A taught question/answer pair as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    answer: str
    teach_count: int
    created_at: datetime
    updated_at: datetime


class SearchResultOut(ConversationEntryOut):
    normalized_question: str
    is_active: bool


class AskResponse(BaseModel):
    status: str = "success"
    question: str
    response: str
    is_taught: bool
    teach_count: Optional[int] = None
    needs_teaching: Optional[bool] = None
    response_time_ms: int
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class TeachResponse(BaseModel):
    status: str = "success"
    message: str = "Successfully taught SimSimi!"
    data: ConversationEntryOut
    response_time_ms: int
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class Pagination(BaseModel):
    page: int
    limit: int
    total_results: int
    has_more: bool


class SearchData(BaseModel):
    results: List[SearchResultOut]
    pagination: Pagination
    search_term: str


class SearchResponse(BaseModel):
    status: str = "success"
    data: SearchData
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class StatsData(BaseModel):
    total_responses: int
    total_interactions: int
    taught_responses: int
    last_taught: Optional[datetime] = None
    avg_response_time_ms: int
    uptime_seconds: float


class StatsResponse(BaseModel):
    status: str = "success"
    data: StatsData
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthResponse(BaseModel):
    """Response model for the /health endpoints."""
    status: str = Field(default="healthy")
    service: str = "SimSimi API"
    version: str
    database: Optional[str] = None
    uptime_seconds: Optional[float] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ApiInfoResponse(BaseModel):
    message: str
    description: str
    version: str
    endpoints: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
