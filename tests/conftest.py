"""
Test infrastructure for the Newsdesk API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after, giving
  each test a clean isolated state without needing transactions or truncation.
- bcrypt runs with the minimum cost factor so seeding users stays cheap.
- Identities are created straight in the database and authenticated with a
  freshly signed bearer token, so most tests never go through /auth.
"""
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from newsdesk.config import settings
from newsdesk.database import Base, get_db
from newsdesk.main import app
from newsdesk.middleware import install_query_counter
from newsdesk.models import User, UserRole
from newsdesk.security import create_access_token, hash_password

settings.BCRYPT_ROUNDS = 4

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Register the per-request SQL query counter on the test engine.
install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override — replace production get_db with the test session factory
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def create_user(
    session: AsyncSession,
    email: str,
    name: str = "Test User",
    role: UserRole = UserRole.AUTHOR,
    password: str = "secret123",
) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=await hash_password(password),
        role=role.value,
    )
    session.add(user)
    await session.flush()
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


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
    """
    Yield a live AsyncSession for tests that call services directly
    (seeding data, asserting ORM state).
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def users() -> dict[str, User]:
    """
    Commit three identities for HTTP tests: two authors (``alice``, ``bob``)
    and an admin (``carol``).
    """
    async with async_session_test() as session:
        created = {
            "alice": await create_user(session, "alice@example.com", "Alice"),
            "bob": await create_user(session, "bob@example.com", "Bob"),
            "carol": await create_user(session, "carol@example.com", "Carol", UserRole.ADMIN),
        }
        await session.commit()
    return created


@pytest.fixture
def headers(users: dict[str, User]) -> dict[str, dict[str, str]]:
    """Bearer-token headers for each identity of the ``users`` fixture."""
    return {name: auth_headers(user) for name, user in users.items()}
