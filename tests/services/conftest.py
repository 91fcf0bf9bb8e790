"""Service test fixtures — async DB, FastAPI test client and session helpers.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - get_verifier overridden with a fixed secret so tests can mint tokens
    - db_manager patched for the readiness endpoint, which bypasses get_db

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (row locks and PostgreSQL types are not exercised here)
    - Accounts are seeded through the repositories, the same path the services use
    - Session cookies are sent as an explicit Cookie header: the real cookies are
      Secure and the test transport is plain http
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from ezwallet.api.session_guard import get_verifier
from ezwallet.core.domain_types import Role
from ezwallet.core.verify_session import SessionVerifier, TokenSettings
from ezwallet.db.base import Base
from ezwallet.infrastructure.database import get_db, DatabaseSessionManager
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.services.auth_service import claims_for, hash_password
import ezwallet.infrastructure.database as db_module
import ezwallet.models  # noqa: F401
from ezwallet.main import app

TEST_SECRET = "service-test-secret"


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def store(test_db):
    return RecordStore.from_session(test_db)


@pytest.fixture
def verifier():
    return SessionVerifier(TokenSettings(secret=TEST_SECRET))


@pytest.fixture
async def client(test_engine, test_session_factory, verifier):
    """FastAPI test client with DB and verifier dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_verifier] = lambda: verifier

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def seed_account(store):
    """Create an account directly in the store. Returns the AccountView."""
    async def _seed(username: str, role: Role = Role.REGULAR, email: str | None = None):
        account = await store.accounts.create(
            username, email or f"{username}@example.com",
            hash_password("secret"), role,
        )
        await store.commit()
        return account
    return _seed


@pytest.fixture
def seed_category(store):
    async def _seed(category_type: str, color: str = "red"):
        category = await store.categories.create(category_type, color)
        await store.commit()
        return category
    return _seed


@pytest.fixture
def seed_record(store):
    async def _seed(username: str, category_type: str, amount: float = 10.0, date=None):
        record = await store.records.create(
            username, category_type, amount, date or datetime.now(timezone.utc),
        )
        await store.commit()
        return record
    return _seed


@pytest.fixture
def seed_group(store):
    async def _seed(name: str, accounts):
        await store.groups.create(name, [(a.email, a.id) for a in accounts])
        await store.commit()
        return await store.groups.find_by_name(name)
    return _seed


@pytest.fixture
def auth_headers(verifier):
    """Cookie header carrying a fresh token pair for the account.

    access_expired=True signs an already-expired access token to exercise rotation.
    """
    def _headers(account, access_expired: bool = False) -> dict:
        claims = claims_for(account)
        refresh = verifier.sign(claims, timedelta(days=7))
        lifetime = timedelta(seconds=-10) if access_expired else timedelta(hours=1)
        access = verifier.sign(claims, lifetime)
        return {"Cookie": f"accessToken={access}; refreshToken={refresh}"}
    return _headers
