from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel.pool import StaticPool

from truthshield.core.database.base import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

API = "http://localhost/api/v1"

DEFAULT_PASSWORD = "Secret123"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    import truthshield.core.database.entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(test_engine, expire_on_commit=False)
    async with async_session_maker() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from truthshield.core.database import get_session
    from truthshield.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("truthshield.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()


RegisterUser = Callable[..., Awaitable[Dict]]


@pytest.fixture
def register_user(client: AsyncClient) -> RegisterUser:
    """Register a user through the API and return ``{token, user, headers}``."""

    async def _register(
        email: str = "alice@example.com",
        age: int = 30,
        persona: str = "individual",
        company: Optional[str] = None,
        first_name: str = "Alice",
        last_name: str = "Smith",
        **extra,
    ) -> Dict:
        payload = {
            "email": email,
            "password": DEFAULT_PASSWORD,
            "first_name": first_name,
            "last_name": last_name,
            "age": age,
            "persona": persona,
            **extra,
        }
        if company is not None:
            payload["company"] = company
        response = await client.post(f"{API}/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {**data, "headers": {"Authorization": f"Bearer {data['token']}"}}

    return _register
