"""Tests for startup seeding."""

import pytest
from sqlalchemy import func, select

from src.core.settings import Settings
from src.models.plan import Plan
from src.models.tenant import Tenant
from src.models.user import User
from src.services.bootstrap import SYSTEM_PLAN, bootstrap
from src.services.quota_service import check_limits


@pytest.mark.asyncio
async def test_bootstrap_seeds_plans_and_system_tenant(db_session):
    await bootstrap(db_session, Settings(environment="test"))

    plan_count = (await db_session.execute(select(func.count()).select_from(Plan))).scalar_one()
    assert plan_count == 4

    system = await db_session.get(Tenant, "system")
    assert system.plan == SYSTEM_PLAN
    assert (await db_session.execute(select(User))).first() is None


@pytest.mark.asyncio
async def test_system_tenant_is_never_quota_limited(db_session):
    await bootstrap(db_session, Settings(environment="test"))

    for resource in ("storage", "users", "clients"):
        await check_limits(db_session, "system", resource, 10 ** 6)


@pytest.mark.asyncio
async def test_bootstrap_creates_superadmin_once(db_session):
    settings = Settings(
        environment="test",
        superadmin_email="Root@VetNexus.example",
        superadmin_password="change-me-now",
    )

    await bootstrap(db_session, settings)
    await bootstrap(db_session, settings)

    admins = (await db_session.execute(select(User))).scalars().all()
    assert len(admins) == 1
    assert admins[0].email == "root@vetnexus.example"
    assert admins[0].roles == ["SuperAdmin"]
    assert admins[0].tenant_id == "system"
