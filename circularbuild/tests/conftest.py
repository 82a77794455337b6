# circularbuild/tests/conftest.py
import os

# circularbuild.main builds an application at import time
os.environ.setdefault("SECRET_KEY", "test_secret_key")

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fakeredis import aioredis  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from circularbuild.api import dependencies  # noqa: E402
from circularbuild.config import AppConfig  # noqa: E402
from circularbuild.domain.listing_rules import utc_today  # noqa: E402
from circularbuild.infrastructure.database import Base, create_database  # noqa: E402
from circularbuild.infrastructure.security import SecurityService  # noqa: E402
from circularbuild.infrastructure.uow import UnitOfWork  # noqa: E402
from circularbuild.main import Application  # noqa: E402

API = "/api/v1"
MAINTENANCE_KEY = "test-maintenance-key"


@pytest.fixture(scope="function")
def app_config():
    """
    Provide a test configuration with an in-memory SQLite database.
    """
    return AppConfig(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        REDIS_HOST="localhost",
        REDIS_PORT=6379,
        REALTIME_ENABLED=True,
        SECRET_KEY="test_secret_key",
        PROJECT_NAME="Test CircularBuild API",
        PROJECT_VERSION="1.0.0",
        PROJECT_DESCRIPTION="Test CircularBuild API",
        API_V1_STR=API,
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=5,
        MAPBOX_TOKEN=None,
        SMTP_HOST=None,
        MAINTENANCE_KEY=MAINTENANCE_KEY,
        DEFAULT_SEARCH_RADIUS_MILES=25.0,
    )


@pytest.fixture(scope="function")
async def mock_redis():
    """Provide a fake Redis client for testing."""
    redis = aioredis.FakeRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


@pytest.fixture(scope="function")
async def engine(app_config):
    """Create an engine whose single connection is shared by every session."""
    engine = create_async_engine(
        app_config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        from circularbuild.infrastructure import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory):
    """Provide a SQLAlchemy session for gateway tests."""
    session = session_factory()
    yield session
    await session.close()


@pytest.fixture(scope="function")
async def uow():
    """Provide a UnitOfWork instance for testing."""
    return UnitOfWork()


@pytest.fixture(scope="function")
def security_service(app_config):
    return SecurityService(app_config)


@pytest.fixture(scope="function")
def override_get_db(session_factory):
    """One session per request, committed or rolled back like the real dependency."""

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _override_get_db


@pytest.fixture(scope="function")
async def application(app_config, mock_redis, engine):
    application = Application(config=app_config)
    application.database = create_database(engine)
    application.redis_client.client = mock_redis
    return application


@pytest.fixture(scope="function")
async def app(application):
    """Create the FastAPI app with the test database."""
    return application.create_app()


@pytest.fixture(scope="function")
async def app_with_db(app, override_get_db):
    """Override dependencies to use the test database session."""
    app.dependency_overrides[dependencies.get_session] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app_with_db):
    """Provide an HTTP client with the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app_with_db), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture(scope="function")
def auth_headers(security_service):
    """Build bearer headers for an arbitrary user id."""

    def _auth_headers(user_id: str, email: str | None = None, name: str | None = None):
        token, _ = security_service.create_access_token(
            user_id, email or f"{user_id}@example.com", name or user_id.title()
        )
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture(scope="function")
def seller_headers(auth_headers):
    return auth_headers("seller-1", name="Sam Seller")


@pytest.fixture(scope="function")
def buyer_headers(auth_headers):
    return auth_headers("buyer-1", name="Bea Buyer")


def _listing_payload(**overrides):
    payload = {
        "title": "Steel beams",
        "material_type": "Steel (structural, generic carbon)",
        "shape": "I-beam",
        "count": 4,
        "approximate_weight_lbs": 500,
        "available_until": (utc_today() + timedelta(days=30)).isoformat(),
        "location_text": "Oakland, CA",
        "lat": 37.8044,
        "lng": -122.2712,
        "description": "Salvaged from a warehouse deconstruction",
        "photos": ["https://cdn.example.com/beams.jpg"],
        "donor_signature": "Sam Seller",
        "consent_contact": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(scope="function")
def listing_payload():
    return _listing_payload


@pytest.fixture(scope="function")
def create_listing(client):
    """Create a listing through the API and return its JSON body."""

    async def _create_listing(headers, **overrides):
        response = await client.post(
            f"{API}/listings", json=_listing_payload(**overrides), headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create_listing


@pytest.fixture(scope="function")
async def test_listing(create_listing, seller_headers):
    return await create_listing(seller_headers)


@pytest.fixture(scope="function")
async def test_chat(client, test_listing, buyer_headers):
    response = await client.post(
        f"{API}/chats/start", json={"listing_id": test_listing["id"]}, headers=buyer_headers
    )
    assert response.status_code == 200, response.text
    return response.json()["chat_id"]
