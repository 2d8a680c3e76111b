"""
Customer Details Backend — Middleware, Versioning & Health Tests
==================================================================

What we test:
    ✅ Sliding window counting, expiry and idle cleanup
    ✅ Login requests get the tighter budget; 429 carries Retry-After
    ✅ X-Request-ID is generated or echoed
    ✅ API version normalization
    ✅ /health reports database reachability
"""

import pytest
from unittest.mock import MagicMock, patch
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.config import settings
from app.middleware.rate_limit import RateLimitMiddleware, SlidingWindow, is_login_path
from app.versioning import normalize_api_version


class TestSlidingWindow:

    def test_allows_up_to_limit(self):
        window = SlidingWindow(limit=2, window=60)
        assert window.retry_after("ip", 0.0) is None
        window.record("ip", 0.0)
        window.record("ip", 1.0)
        assert window.retry_after("ip", 2.0) == 59

    def test_old_hits_expire(self):
        window = SlidingWindow(limit=1, window=60)
        window.record("ip", 0.0)
        assert window.retry_after("ip", 30.0) is not None
        assert window.retry_after("ip", 60.0) is None

    def test_clients_are_independent(self):
        window = SlidingWindow(limit=1, window=60)
        window.record("a", 0.0)
        assert window.retry_after("b", 0.0) is None

    def test_forget_idle(self):
        window = SlidingWindow(limit=5, window=10)
        window.record("old", 0.0)
        window.record("new", 95.0)
        assert window.forget_idle(100.0) == 1
        assert window.retry_after("new", 100.0) is None


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/User/Login", True),
        ("/api/User/v1/Login", True),
        ("/api/User/Login/", True),
        ("/api/User/SearchUser", False),
        ("/Login", False),
    ],
)
def test_is_login_path(path, expected):
    assert is_login_path(path) is expected


class TestRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_login_budget(self):
        with patch.object(settings, "login_rate_limit_requests", 2):
            app = FastAPI()
            app.add_middleware(RateLimitMiddleware)

            @app.post("/api/User/Login")
            async def login():
                return {"ok": True}

            @app.get("/api/User/SearchUser")
            async def search():
                return {"ok": True}

            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                statuses = [(await client.post("/api/User/Login")).status_code for _ in range(3)]
                limited = await client.post("/api/User/Login")
                other = await client.get("/api/User/SearchUser")

        assert statuses == [200, 200, 429]
        assert limited.status_code == 429
        assert int(limited.headers["Retry-After"]) > 0
        assert limited.json()["error"] == "rate_limit_exceeded"
        assert other.status_code == 200


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated(self, test_client):
        response = await test_client.get("/api/User/GetAllCustomerList")
        assert len(response.headers["X-Request-ID"]) == 8
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_client_value_is_echoed(self, test_client):
        response = await test_client.get(
            "/api/User/GetAllCustomerList", headers={"X-Request-ID": "trace-123"}
        )
        assert response.headers["X-Request-ID"] == "trace-123"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1", "1.0"),
        ("1.0", "1.0"),
        ("v1", "1.0"),
        ("V2.1", "2.1"),
        ("latest", None),
        ("1.0.0", None),
        ("", None),
    ],
)
def test_normalize_api_version(raw, expected):
    assert normalize_api_version(raw) == expected


class TestHealth:

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_unreachable(self, test_client):
        broken_engine = MagicMock()
        broken_engine.connect.side_effect = OSError("connection refused")

        with patch("app.routes.health.engine", broken_engine):
            response = await test_client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"
