import os
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Settings are read on import, point them at sqlite before loading the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from app.core.database import Base, build_engine, get_db  # noqa: E402
from app.main import app  # noqa: E402

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
async def db():
    """Create a fresh database session for each test."""
    engine = build_engine(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)  # Clean slate
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    await engine.dispose()


@pytest.fixture(autouse=True)
def override_get_db(db: AsyncSession):
    """Override the get_db dependency to use test database."""

    async def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def fixed_now():
    """Wednesday noon, for deterministic timeline windows."""
    return datetime(2024, 5, 15, 12, 0, 0, tzinfo=timezone.utc)


# Test Authentication Utilities
def get_auth_headers(user_id: int) -> dict[str, str]:
    """
    Generate authentication headers for tests.

    Since Descope is not configured in tests, the Bearer token
    is treated as a simple user ID string by the fallback auth.
    """
    return {"Authorization": f"Bearer {user_id}"}


# Import all knowledge base fixtures to make them available
pytest_plugins = ["tests.fixtures.knowledge_fixtures"]
