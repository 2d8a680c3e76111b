"""
Customer Details Backend — Test Configuration (conftest.py)
=============================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (mocked DB, API client, tokens).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── make_result: Builder for fake `session.execute()` results
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── sample_customers: Two customers sharing a zip code, one without address
    ├── admin_token / client_token: Signed bearer tokens per role
    └── test_client: HTTPX AsyncClient with get_db_session overridden
"""

import os

# Override settings for testing BEFORE any app imports
# Why: app.config builds its singleton at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-chars"
os.environ["BCRYPT_ROUNDS"] = "4"  # Fastest bcrypt cost; hashing is not under test
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOGIN_RATE_LIMIT_REQUESTS"] = "100000"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = ""
os.environ["SEED_DATA_PATH"] = ""
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import Any, Iterable, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from app.models.customer import AddressData, UserData  # noqa: E402
from app.models.identity import ADMIN_ROLE, CLIENT_ROLE  # noqa: E402
from app.services.login_service import login_service  # noqa: E402


def _make_result(scalar: Any = None, scalars: Optional[Iterable[Any]] = None) -> MagicMock:
    """
    Fake the Result of `await session.execute(...)`.

    Usage:
        mock_db_session.execute.return_value = make_result(scalar=user)
        mock_db_session.execute.side_effect = [make_result(scalars=[...]), ...]
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    result.scalars.return_value.all.return_value = list(scalars or [])
    return result


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_result():
    """Gives tests the fake-Result builder."""
    return _make_result


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    Why:     Tests should not require a real database.
    How:     execute/flush/commit/rollback/close are awaitable; add is sync.
             execute returns an empty result unless a test sets its own.
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=_make_result())
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_customers():
    """
    Three customers: two share zip code 2583, the third has no address.

    Built as real (transient) ORM objects so response models can read them
    exactly as they read rows loaded from the database.
    """
    shared = AddressData(
        id="addr-1",
        house_number=914,
        street="Bath Avenue",
        city="Glenshaw",
        state="Ohio",
        zip_code="2583",
    )
    return [
        UserData(
            id="5f1d7f3e9c1b2a0017a1b2c3",
            index=0,
            age=31,
            eye_color="brown",
            name="Ayala Blake",
            gender="female",
            company="ZILLAN",
            email="ayalablake@zillan.com",
            phone="+1 (845) 512-3921",
            latitude=-38.41,
            longitude=151.52,
            tags=["irure", "ad"],
            address_id=shared.id,
            address=shared,
        ),
        UserData(
            id="5f1d7f3e9c1b2a0017a1b2c4",
            index=1,
            age=45,
            eye_color="green",
            name="Moran Castro",
            company="ZILLAN",
            latitude=12.5,
            longitude=-70.0,
            tags=[],
            address_id=shared.id,
            address=shared,
        ),
        UserData(
            id="5f1d7f3e9c1b2a0017a1b2c5",
            index=2,
            name="Leila Vance",
            latitude=None,
            longitude=None,
            address=None,
        ),
    ]


@pytest.fixture
def admin_token():
    return login_service.generate_jwt_token("admin", ADMIN_ROLE)


@pytest.fixture
def client_token():
    return login_service.generate_jwt_token("client", CLIENT_ROLE)


@pytest.fixture
def auth_header():
    """Builds the Authorization header for a token."""
    def _header(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    How:     ASGITransport routes requests straight to the app (the lifespan
             does not run, so nothing connects to a database); every
             get_db_session dependency yields `mock_db_session`.

    Usage:
        async def test_search(test_client, mock_db_session):
            mock_db_session.execute.return_value = make_result(scalars=[...])
            response = await test_client.get("/api/User/SearchUser?searchText=x")
    """
    from app.database import get_db_session
    from app.main import app

    async def override_db_session():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db_session, None)
