"""
Tests for rate limiting and request size middleware.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient
from workhours.middleware.ratelimit import RateLimitMiddleware, TokenBucket
from workhours.middleware.request_size import RequestSizeLimitMiddleware


def _app(capacity: int = 2) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, capacity=capacity)
    app.add_middleware(RequestSizeLimitMiddleware, max_size_bytes=100)

    @app.get("/healthz")
    async def health():
        return {"ok": True}

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/pong")
    async def pong():
        return {"ok": True}

    @app.post("/echo")
    async def echo(body: dict):
        return body

    return app


def test_rate_limiting():
    """Test rate limiting enforcement."""
    client = TestClient(_app(capacity=2))
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200

    response = client.get("/ping")
    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1
    body = response.json()
    assert body["ok"] is False
    assert body["error"]["code"] == "rate_limited"


def test_rate_limit_per_path():
    """Test rate limit is enforced per path."""
    client = TestClient(_app(capacity=1))
    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 429
    assert client.get("/pong").status_code == 200


def test_health_is_exempt():
    client = TestClient(_app(capacity=1))
    for _ in range(5):
        assert client.get("/healthz").status_code == 200


def test_token_bucket_refill():
    bucket = TokenBucket(refill_rate=1.0, burst=1)
    assert bucket.consume()
    assert not bucket.consume()
    assert bucket.retry_after() >= 1
    bucket.updated -= 1.5
    assert bucket.consume()


def test_request_size_limit():
    """Test oversized bodies are rejected before the handler runs."""
    client = TestClient(_app(capacity=10))
    assert client.post("/echo", json={"a": 1}).status_code == 200

    response = client.post("/echo", json={"text": "x" * 500})
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "payload_too_large"
