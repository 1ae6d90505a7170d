"""Pytest configuration and fixtures."""

import os
import uuid

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.api.dependencies.common import get_payment_client
from src.core.database import Base, get_db_session, get_session_factory
from src.main import app
from src.middleware.auth import create_access_token
from src.models.owner import Owner
from src.models.tenant import Tenant, TenantStatus
from src.models.user import User
from src.services.audit import AuditLogger, get_audit_logger
from src.services.plans import seed_plans

# Password hashing is slow; records that never log in share a dummy hash
DUMMY_HASH = "not-a-real-hash"


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite database per test, shared by every session."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def plans(session_factory):
    """The default plan catalog, seeded."""
    async with session_factory() as session:
        return await seed_plans(session)


@pytest_asyncio.fixture
async def audit_logger(session_factory):
    audit = AuditLogger(session_factory)
    yield audit
    await audit.drain()


@pytest.fixture
def make_tenant(session_factory):
    """Factory creating a tenant row."""
    async def _make(
        plan: str = "Trial",
        status: str = TenantStatus.ACTIVE,
        storage_used: float = 0.0,
        name: str = "Happy Paws Clinic",
    ) -> Tenant:
        async with session_factory() as session:
            tenant = Tenant(
                name=name,
                plan=plan,
                status=status,
                storage_used=storage_used,
                billing_period="monthly",
                settings={"currency": "USD", "locale": "en"},
            )
            session.add(tenant)
            await session.commit()
            return tenant
    return _make


@pytest.fixture
def add_users(session_factory):
    """Factory adding ``count`` staff users to a tenant."""
    async def _add(tenant_id: str, count: int = 1, roles=None):
        async with session_factory() as session:
            users = [
                User(
                    tenant_id=tenant_id,
                    name=f"Staff {i}",
                    email=f"staff-{uuid.uuid4().hex[:12]}@example.com",
                    password_hash=DUMMY_HASH,
                    roles=roles or ["Veterinarian"],
                )
                for i in range(count)
            ]
            session.add_all(users)
            await session.commit()
            return users
    return _add


@pytest.fixture
def add_owners(session_factory):
    """Factory adding ``count`` owners (clients) to a tenant."""
    async def _add(tenant_id: str, count: int = 1):
        async with session_factory() as session:
            owners = [
                Owner(tenant_id=tenant_id, name=f"Owner {i}", phone="+2348000000000")
                for i in range(count)
            ]
            session.add_all(owners)
            await session.commit()
            return owners
    return _add


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user of a tenant."""
    def _headers(tenant_id: str, user_id: str = "user-1", roles=None, name: str = "Dr. Ada") -> dict:
        token = create_access_token(user_id, tenant_id, roles or ["Admin"], name=name)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest_asyncio.fixture
async def client(session_factory, audit_logger, plans):
    """Create a test client with database dependency overrides."""

    async def get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = get_test_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_audit_logger] = lambda: audit_logger
    app.dependency_overrides[get_payment_client] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
