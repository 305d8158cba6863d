"""Test fixtures for TeamBuilder backend tests."""

import os
import uuid

# Settings are read at import time; point them at SQLite and ignore override files
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DB_OVERRIDE_FILE", "")
os.environ.setdefault("REPLIT_DB_FILE", "")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from teambuilder.database import Base, enable_sqlite_savepoints, get_db  # noqa: E402
from teambuilder.main import app  # noqa: E402
from teambuilder.models.company import Company  # noqa: E402
from teambuilder.models.user import User  # noqa: E402

# Use SQLite for tests by default (no external DB needed).
# Override with TEST_DATABASE_URL env var for PostgreSQL integration tests.
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test.db",
)

_connect_args = {}
_is_sqlite = "sqlite" in TEST_DATABASE_URL
if _is_sqlite:
    _connect_args["check_same_thread"] = False

engine = create_async_engine(
    TEST_DATABASE_URL, echo=False, connect_args=_connect_args, poolclass=NullPool
)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

if _is_sqlite:
    from sqlalchemy.dialects.sqlite.base import SQLiteTypeCompiler

    SQLiteTypeCompiler.visit_UUID = lambda self, type_, **kw: "TEXT"  # type: ignore[attr-defined]
    enable_sqlite_savepoints(engine)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db() -> AsyncSession:
    """Get a test database session."""
    async with TestSessionLocal() as session:
        yield session


@pytest.fixture
async def client(db: AsyncSession) -> AsyncClient:
    """Get an HTTP client with test DB injected."""

    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_company(db: AsyncSession):
    """Factory: persist a company with the given team size."""

    async def _make(name: str = "MakeCents Group", group_size: int = 4) -> Company:
        company = Company(name=name, group_size=group_size)
        db.add(company)
        await db.flush()
        return company

    return _make


def user_payload(company_id: uuid.UUID | None = None, **overrides) -> dict:
    suffix = uuid.uuid4().hex[:8]
    payload = {
        "first_name": "Test",
        "last_name": f"User{suffix}",
        "email": f"user-{suffix}@example.com",
        "phone": "555-0100",
        "address": "1 Main St",
        "company_id": str(company_id) if company_id else None,
    }
    payload.update(overrides)
    return payload


async def add_legacy_user(db: AsyncSession, company_id: uuid.UUID, first_name: str) -> User:
    """Insert a user the old way: no join position, no team assignment."""
    user = User(
        first_name=first_name,
        last_name="Legacy",
        email=f"{first_name.lower()}-{uuid.uuid4().hex[:6]}@example.com",
        phone="555-0199",
        address="2 Old Rd",
        company_id=company_id,
    )
    db.add(user)
    await db.flush()
    return user
