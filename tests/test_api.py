"""HTTP tests for the SimSimi API."""
from contextlib import contextmanager
from dataclasses import replace

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from simsimi.api.main import create_app
from simsimi.core.rate_limiter import RateLimiter
from simsimi.services.conversation_service import FALLBACK_RESPONSES


def teach(client, question, answer):
    return client.post("/api/v1/teach", json={"question": question, "answer": answer})


def test_liveness(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"


def test_api_health_reports_database(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["service"] == "SimSimi API"


def test_api_info_lists_endpoints(client):
    resp = client.get("/api/v1/")
    assert resp.status_code == 200
    assert set(resp.json()["endpoints"]) == {"ask", "teach", "stats", "search"}


def test_teach_and_ask_flow(client):
    resp = teach(client, "hello", "Hi there!")
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "success"
    assert body["message"] == "Successfully taught SimSimi!"
    assert body["data"]["question"] == "hello"
    assert body["data"]["answer"] == "Hi there!"
    assert body["data"]["teach_count"] == 1

    resp = client.get("/api/v1/ask", params={"q": "  HELLO  "})
    assert resp.status_code == 200
    body = resp.json()
    assert body["response"] == "Hi there!"
    assert body["is_taught"] is True
    assert body["teach_count"] == 1
    assert "needs_teaching" not in body

    resp = teach(client, "hello", "Hey!")
    assert resp.json()["data"]["teach_count"] == 2

    body = client.get("/api/v1/ask", params={"q": "hello"}).json()
    assert body["response"] == "Hey!"
    assert body["teach_count"] == 2


def test_ask_unknown_question(client):
    resp = client.get("/api/v1/ask", params={"q": "unknown-xyz"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["question"] == "unknown-xyz"
    assert body["is_taught"] is False
    assert body["needs_teaching"] is True
    assert body["response"] in FALLBACK_RESPONSES
    assert "teach_count" not in body


def test_ask_requires_question(client):
    for params in ({}, {"q": "   "}):
        resp = client.get("/api/v1/ask", params=params)
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation_error"


def test_teach_validation_errors(client):
    cases = [
        {"question": "", "answer": "hi"},
        {"question": "hi", "answer": ""},
        {"answer": "hi"},
        {"question": "x" * 501, "answer": "hi"},
        {"question": "hi", "answer": "y" * 1001},
    ]
    for payload in cases:
        resp = client.post("/api/v1/teach", json=payload)
        assert resp.status_code == 400, payload
        assert resp.json()["error"] == "validation_error"

    stats = client.get("/api/v1/stats").json()["data"]
    assert stats["total_responses"] == 0
    assert stats["total_interactions"] == 0


def test_search_with_pagination(client):
    for _ in range(3):
        teach(client, "hello world", "classic")
    teach(client, "hello there", "general kenobi")
    teach(client, "bye", "see you")

    resp = client.get("/api/v1/search", params={"q": "Hello", "limit": 1})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["search_term"] == "Hello"
    assert [r["question"] for r in data["results"]] == ["hello world"]
    assert data["results"][0]["teach_count"] == 3
    assert data["pagination"] == {
        "page": 1, "limit": 1, "total_results": 1, "has_more": True
    }

    data = client.get(
        "/api/v1/search", params={"q": "hello", "limit": 1, "page": 2}
    ).json()["data"]
    assert [r["question"] for r in data["results"]] == ["hello there"]

    data = client.get(
        "/api/v1/search", params={"q": "hello", "limit": 10}
    ).json()["data"]
    assert data["pagination"]["total_results"] == 2
    assert data["pagination"]["has_more"] is False


def test_search_requires_term(client):
    resp = client.get("/api/v1/search", params={"q": " "})
    assert resp.status_code == 400


def test_search_rejects_out_of_range_limit(client):
    resp = client.get("/api/v1/search", params={"q": "hi", "limit": 0})
    assert resp.status_code == 422


def test_stats_with_seeded_defaults(seeded_client):
    for question in ["hello", "what is your name", "never taught"]:
        seeded_client.get("/api/v1/ask", params={"q": question})

    resp = seeded_client.get("/api/v1/stats")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_responses"] == 8
    assert data["total_interactions"] == 3
    assert data["taught_responses"] == 2
    assert data["last_taught"] is not None
    assert isinstance(data["avg_response_time_ms"], int)
    assert data["uptime_seconds"] >= 0


def test_rate_limit_headers(client):
    resp = client.get("/api/v1/stats")
    assert resp.headers["X-RateLimit-Limit"] == "100"
    assert resp.headers["X-RateLimit-Remaining"] == "99"
    assert "X-RateLimit-Reset" in resp.headers


def test_rate_limit_exceeded(settings):
    limiter = RateLimiter(requests_per_window=2, window_seconds=60)
    with TestClient(create_app(settings, rate_limiter=limiter)) as client:
        assert client.get("/api/v1/ask", params={"q": "hi"}).status_code == 200
        assert client.get("/api/v1/ask", params={"q": "hi"}).status_code == 200

        resp = client.get("/api/v1/ask", params={"q": "hi"})
        assert resp.status_code == 429
        assert resp.json()["error"] == "rate_limit_exceeded"
        assert int(resp.headers["Retry-After"]) >= 1

        # liveness is not rate limited
        assert client.get("/health").status_code == 200


def test_audit_middleware_sets_response_time(settings):
    with TestClient(create_app(replace(settings, enable_audit_logging=True))) as client:
        resp = client.get("/api/v1/ask", params={"q": "hello"})
        assert resp.status_code == 200
        assert resp.headers["X-Response-Time"].endswith("s")


def test_storage_failure_returns_503_without_retry(client, monkeypatch):
    attempts = []

    @contextmanager
    def failing_session():
        attempts.append(1)
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        yield

    monkeypatch.setattr(client.app.state.database, "get_session", failing_session)

    resp = client.get("/api/v1/ask", params={"q": "hello"})

    assert resp.status_code == 503
    assert resp.json()["error"] == "storage_failure"
    assert len(attempts) == 1


def test_unknown_route_returns_json_404(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "not_found"
    assert body["message"] == "Route not found"
    assert body["details"] == "path=/api/v1/nope"
    assert "timestamp" in body
