"""
Test infrastructure for the blog service.

Strategy
--------
- SQLite in-memory via aiosqlite, so no Postgres instance is needed.
- StaticPool makes every session share the one in-memory connection; a new
  connection would see an empty database.
- ``get_db`` and ``get_session_factory`` are overridden so request sessions
  and background-task sessions both use the test engine.
- Tables are created before and dropped after each test.
- Callers authenticate with real bearer tokens minted by
  ``create_access_token``; ``register_user`` returns the id and the
  ``Authorization`` header for a fresh user.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from blog_service.database import Base, get_db, get_session_factory
from blog_service.main import app
from blog_service.middleware import install_query_counter
from blog_service.security import create_access_token

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency overrides
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_session_factory] = lambda: async_session_test


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live session for service-level tests and direct ORM assertions."""
    async with async_session_test() as session:
        yield session


@pytest.fixture
def session_factory():
    return async_session_test


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def register_user(async_client: AsyncClient):
    """
    Factory fixture: ``await register_user("alice")`` creates a user through
    the API and returns ``(user_id, headers)`` ready for authenticated calls.
    """
    async def _register(name: str) -> tuple[int, dict]:
        resp = await async_client.post("/users", json={
            "name": name,
            "email": f"{name.lower()}@example.com",
        })
        assert resp.status_code == 201
        user_id = resp.json()["id"]
        return user_id, {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _register
