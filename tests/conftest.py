"""
Test infrastructure for the content API.

Strategy
--------
- SQLite in-memory via aiosqlite, shared through StaticPool because an
  in-memory database is connection-scoped.
- The app's get_db dependency is overridden so every test-time request
  uses the test session factory.
- All tables are created before each test and dropped after.
- Redis is disabled by setting cache._redis = None; the ArticleCache treats
  that as a permanent miss, so every request exercises the database path.
- bcrypt runs with the minimum cost factor to keep signups fast.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from quillcms.cache import cache
from quillcms.config import settings
from quillcms.database import Base, get_db, install_sqlite_pragmas, transaction
from quillcms.main import app
from quillcms.middleware import install_query_counter

from helpers import ADMIN_PASSWORD, READER_PASSWORD, SIGNUP, MemoryRedis

settings.BCRYPT_ROUNDS = 4

# ---------------------------------------------------------------------------
# Test database engine - SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)
install_sqlite_pragmas(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override - replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session, transaction(session):
        yield session


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    cache._redis = None
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """A live AsyncSession for seeding data and asserting ORM state."""
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def gql(async_client: AsyncClient):
    """
    Return a coroutine function posting a GraphQL document to /graphql and
    returning the decoded JSON body.
    """

    async def run(query: str, variables: dict | None = None, token: str | None = None) -> dict:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        resp = await async_client.post(
            "/graphql", json={"query": query, "variables": variables or {}}, headers=headers
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return run


@pytest_asyncio.fixture
async def admin_auth(gql) -> dict:
    """Sign up the configured admin user; returns ``{token, user}``."""
    body = await gql(SIGNUP, {
        "name": settings.ADMIN_USER,
        "email": "admin@example.com",
        "password": ADMIN_PASSWORD,
    })
    return body["data"]["signup"]


@pytest_asyncio.fixture
async def admin_token(admin_auth: dict) -> str:
    return admin_auth["token"]


@pytest_asyncio.fixture
async def reader_token(gql) -> str:
    """Sign up an ordinary (non-admin) user and return its token."""
    body = await gql(SIGNUP, {
        "name": "reader",
        "email": "reader@example.com",
        "password": READER_PASSWORD,
    })
    return body["data"]["signup"]["token"]



@pytest.fixture
def redis_store() -> dict:
    """Back the article cache with an in-memory Redis; yields its key store."""
    fake = MemoryRedis()
    cache._redis = fake
    yield fake.store
    cache._redis = None
