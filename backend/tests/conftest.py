"""
Annuaire Backend — Test Configuration (conftest.py)
=====================================================

Environment is set before any `app` import so the settings singleton, the
engine and the Stripe service are built for tests:

    DATABASE_URL       SQLite file in a temp dir (aiosqlite driver)
    STRIPE_SECRET_KEY  fake test key; the SDK is always patched
    RETRY_*            two attempts, no backoff sleeps

Fixtures:
    db_schema      creates / drops every table around a test
    db_session     AsyncSession on the test database
    test_client    httpx AsyncClient bound to the ASGI app
    make_professional / make_review   row builders
"""

import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="annuaire_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_not_a_real_key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MAX_ATTEMPTS"] = "2"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "0"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from datetime import datetime, timezone  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Base, async_session_factory, engine  # noqa: E402
from app.models.catalog import Partner, PartnerOffer, SubCategory  # noqa: E402,F401
from app.models.professional import Professional  # noqa: E402
from app.models.review import Review  # noqa: E402
from app.services.stripe_service import stripe_service  # noqa: E402


@pytest_asyncio.fixture
async def db_schema():
    """Fresh schema per test. Pooled connections are bound to the test's loop, so they are dropped too."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_schema):
    async with async_session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def reset_circuit_breaker():
    """The Stripe singleton is shared by every test."""
    breaker = stripe_service.circuit_breaker
    breaker.failure_count = 0
    breaker.state = breaker.CLOSED
    breaker.last_failure_time = None
    yield


@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_professional():
    """Builds (does not persist) a Professional with sensible defaults."""

    def _make(**overrides) -> Professional:
        values = {
            "title": "Studio Lumière",
            "category": "Photographie",
            "sub_category": "Mariage",
            "speciality": "Portrait",
            "description": "Photographe de mariage et de portrait",
            "address": "12 rue Saint-Denis",
            "city": "Montréal",
            "plan": "premium",
            "is_active": True,
        }
        values.update(overrides)
        return Professional(**values)

    return _make


@pytest.fixture
def make_review():
    def _make(**overrides) -> Review:
        values = {
            "professional_id": "pro-1",
            "author_name": "Camille",
            "rating": 5,
            "title": "Excellent",
            "message": "Très professionnel",
            "date_created": datetime(2025, 8, 5, 12, 0, tzinfo=timezone.utc),
            "date_created_formatted": "05 août 2025",
        }
        values.update(overrides)
        return Review(**values)

    return _make


@pytest_asyncio.fixture
async def seed(db_session):
    """Persists rows and returns them: `await seed(row1, row2)`."""

    async def _seed(*rows):
        db_session.add_all(rows)
        await db_session.commit()
        return rows

    return _seed
