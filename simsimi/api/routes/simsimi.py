"""
SimSimi Routes - Ask, teach, search and stats endpoints.

Every route in this module passes the per-client rate limiter. The
router has no prefix of its own; the application mounts it under
/api/<version>.
"""
import time
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from simsimi.api.dependencies import (
    client_address,
    enforce_rate_limit,
    get_conversation_service,
)
from simsimi.core.logging_config import get_logger
from simsimi.models.conversation import (
    ApiInfoResponse,
    AskResponse,
    ConversationEntryOut,
    ErrorResponse,
    HealthResponse,
    Pagination,
    SearchData,
    SearchResponse,
    SearchResultOut,
    StatsData,
    StatsResponse,
    TeachRequest,
    TeachResponse,
)
from simsimi.services.conversation_service import ConversationService

logger = get_logger(__name__)

APP_VERSION = "1.0.0"

router = APIRouter(
    tags=["SimSimi"],
    dependencies=[Depends(enforce_rate_limit)],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    }
)


def _user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "")


@router.get("/", response_model=ApiInfoResponse, summary="API documentation")
async def api_info(request: Request) -> ApiInfoResponse:
    """Describe the available endpoints."""
    prefix = request.app.state.settings.api_prefix
    return ApiInfoResponse(
        message=f"SimSimi API {APP_VERSION}",
        description="A smart chatbot that learns from conversations",
        version=APP_VERSION,
        endpoints={
            "ask": {
                "method": "GET",
                "path": f"{prefix}/ask",
                "description": "Ask SimSimi a question",
                "parameters": {"q": "The question to ask (required)"},
                "example": f"{prefix}/ask?q=hello",
            },
            "teach": {
                "method": "POST",
                "path": f"{prefix}/teach",
                "description": "Teach SimSimi a new response",
                "body": {
                    "question": "The question (required)",
                    "answer": "The answer (required)",
                },
            },
            "stats": {
                "method": "GET",
                "path": f"{prefix}/stats",
                "description": "Get API statistics",
            },
            "search": {
                "method": "GET",
                "path": f"{prefix}/search",
                "description": "Search responses",
                "parameters": {
                    "q": "Search term (required)",
                    "limit": "Results per page (default: 10)",
                    "page": "Page number (default: 1)",
                },
            },
        },
    )


@router.get(
    "/ask",
    response_model=AskResponse,
    response_model_exclude_none=True,
    summary="Ask SimSimi a question",
)
def ask(
    request: Request,
    q: Optional[str] = Query(default=None, description="The question to ask"),
    service: ConversationService = Depends(get_conversation_service),
) -> AskResponse:
    """
    Return the taught answer for a question.

    Matching ignores case and surrounding whitespace. When nothing has
    been taught, the response is a fallback prompt with needs_teaching.
    """
    result = service.ask(
        q,
        user_agent=_user_agent(request),
        ip_address=client_address(request),
    )

    return AskResponse(
        question=result.question,
        response=result.answer,
        is_taught=result.was_taught,
        teach_count=result.teach_count,
        needs_teaching=True if result.needs_teaching else None,
        response_time_ms=result.response_time_ms,
    )


@router.post(
    "/teach",
    response_model=TeachResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Teach SimSimi a new response",
)
def teach(
    body: TeachRequest,
    request: Request,
    service: ConversationService = Depends(get_conversation_service),
) -> TeachResponse:
    """
    Store a question/answer pair.

    Re-teaching a question replaces its answer and increments teach_count.
    Questions are limited to 500 characters and answers to 1000 by default.
    """
    result = service.teach(
        body.question,
        body.answer,
        user_agent=_user_agent(request),
        ip_address=client_address(request),
    )

    return TeachResponse(
        data=ConversationEntryOut.model_validate(result.entry),
        response_time_ms=result.response_time_ms,
    )


@router.get("/search", response_model=SearchResponse, summary="Search responses")
def search(
    q: Optional[str] = Query(default=None, description="Search term"),
    limit: int = Query(default=10, ge=1, le=100, description="Results per page"),
    page: int = Query(default=1, ge=1, description="Page number"),
    service: ConversationService = Depends(get_conversation_service),
) -> SearchResponse:
    """
    Search taught questions and answers.

    has_more is true when the page is full; the next page may still be empty.
    """
    offset = (page - 1) * limit
    results = service.search(q, limit=limit, offset=offset)

    return SearchResponse(
        data=SearchData(
            results=[SearchResultOut.model_validate(entry) for entry in results],
            pagination=Pagination(
                page=page,
                limit=limit,
                total_results=len(results),
                has_more=len(results) == limit,
            ),
            search_term=q,
        )
    )


@router.get("/stats", response_model=StatsResponse, summary="Get API statistics")
def stats(
    request: Request,
    service: ConversationService = Depends(get_conversation_service),
) -> StatsResponse:
    snapshot = service.stats()

    return StatsResponse(
        data=StatsData(
            total_responses=snapshot.total_responses,
            total_interactions=snapshot.total_interactions,
            taught_responses=snapshot.taught_responses,
            last_taught=snapshot.last_taught_at,
            avg_response_time_ms=round(snapshot.avg_response_time_ms or 0),
            uptime_seconds=time.monotonic() - request.app.state.started_at,
        )
    )


@router.get("/health", response_model=HealthResponse, summary="Service and database health")
def health(request: Request) -> HealthResponse:
    """Report whether the database answers a trivial query."""
    db_health = request.app.state.database.health_check()
    if not db_health["healthy"]:
        logger.warning(f"Database unhealthy: {db_health['error']}")

    return HealthResponse(
        status="healthy" if db_health["healthy"] else "degraded",
        version=APP_VERSION,
        database="connected" if db_health["healthy"] else "disconnected",
        uptime_seconds=time.monotonic() - request.app.state.started_at,
        timestamp=datetime.utcnow(),
    )
