"""Service test fixtures: async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database behind SqlKeyValueStore
    - The app is built with a prebuilt AppContext; fakes stand in for the
      identity provider and payment processor
    - Dev routes enabled and an admin token set so every router is reachable

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (the kv_store table uses no PostgreSQL-specific features)
    - DatabaseSessionManager built with __new__ so it wraps the test engine
      instead of creating its own pool
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from stoic_journal.config import Settings
from stoic_journal.core.domain_types import Track
from stoic_journal.db.base import Base
from stoic_journal.infrastructure.database import DatabaseSessionManager
from stoic_journal.infrastructure.kv_store import SqlKeyValueStore
from stoic_journal.main import create_app
from stoic_journal.services.app_context import AppContext

from tests.services.fakes import ADMIN_TOKEN, FakeIdentityProvider, FakePaymentGateway


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
def db_manager(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def store(db_manager):
    return SqlKeyValueStore(db_manager)


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        admin_token=ADMIN_TOKEN,
        enable_dev_routes=True,
        stripe_publishable_key="pk_test_123",
    )


@pytest.fixture
def context(settings, store, identity, gateway, db_manager):
    return AppContext(
        settings=settings,
        store=store,
        identity=identity,
        payments=gateway,
        db_manager=db_manager,
    )


@pytest.fixture
async def client(context):
    """FastAPI test client bound to the test context."""
    app = create_app(context=context)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
def grant(context):
    """Credit tracks directly, bypassing payment."""
    async def _grant(user_id: str, *track_names: str):
        await context.ledger.credit(user_id, [Track(name) for name in track_names])
    return _grant
