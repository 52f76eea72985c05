"""Shared fixtures: an in-memory database per test and an HTTP client bound to it."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import onboard.domain  # noqa: F401
from onboard.core.config import settings
from onboard.db.base import Base, get_db
from onboard.main import create_app
from onboard.repositories.vendor import VendorRepository

ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Role": "admin", "X-Actor-Name": "Asha"}
AGENT = {"X-Actor-Id": "agent-1", "X-Actor-Role": "agent", "X-Actor-Name": "Ravi"}
OTHER_AGENT = {"X-Actor-Id": "agent-2", "X-Actor-Role": "agent", "X-Actor-Name": "Meera"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def client_id():
    return settings.default_client_id


@pytest.fixture
def make_vendor(session, client_id):
    """Insert a vendor owned by agent-1 unless overridden."""

    async def _make(**overrides):
        fields = {
            "restaurant_name": "Spice Route",
            "created_by_id": "agent-1",
            "created_by_name": "Ravi",
            "created_by_role": "agent",
        }
        fields.update(overrides)
        return await VendorRepository(session, client_id).create(**fields)

    return _make


@pytest.fixture
async def client(session_factory):
    app = create_app(enable_audit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
