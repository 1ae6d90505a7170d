"""Tests for the quota checker."""

import logging

import pytest

from src.models.plan import Plan
from src.models.tenant import TenantStatus
from src.services.quota_service import (
    AccountRestrictedError,
    FeatureNotAvailableError,
    QuotaExceededError,
    TenantNotFoundError,
    check_feature,
    check_limits,
    get_usage,
)

RESOURCES = ("storage", "users", "clients")


@pytest.mark.asyncio
async def test_unknown_tenant_raises_not_found(db_session, plans):
    with pytest.raises(TenantNotFoundError):
        await check_limits(db_session, "does-not-exist", "users", 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [TenantStatus.RESTRICTED, TenantStatus.SUSPENDED])
@pytest.mark.parametrize("plan", ["Trial", "Premium", "Enterprise"])
async def test_blocked_tenant_is_restricted_for_every_resource(db_session, plans, make_tenant, status, plan):
    tenant = await make_tenant(plan=plan, status=status)

    for resource in RESOURCES:
        with pytest.raises(AccountRestrictedError) as exc_info:
            await check_limits(db_session, tenant.id, resource, 0)
        assert "Please contact support or update payment." in str(exc_info.value)
        assert exc_info.value.status == status


@pytest.mark.asyncio
async def test_unlimited_users_always_pass(db_session, plans, make_tenant, add_users):
    tenant = await make_tenant(plan="Premium")
    await add_users(tenant.id, 5)

    for increment in (0, 1, 1000):
        result = await check_limits(db_session, tenant.id, "users", increment)
        assert result.id == tenant.id


@pytest.mark.asyncio
async def test_user_limit_at_ceiling(db_session, plans, make_tenant, add_users):
    tenant = await make_tenant(plan="Starter")
    await add_users(tenant.id, 2)

    with pytest.raises(QuotaExceededError) as exc_info:
        await check_limits(db_session, tenant.id, "users", 1)
    assert exc_info.value.resource_type == "users"
    assert exc_info.value.limit == 2
    assert "2 users max" in str(exc_info.value)

    await check_limits(db_session, tenant.id, "users", 0)


@pytest.mark.asyncio
async def test_users_of_other_tenants_are_not_counted(db_session, plans, make_tenant, add_users):
    tenant = await make_tenant(plan="Starter")
    other = await make_tenant(plan="Starter", name="Other Clinic")
    await add_users(other.id, 2)

    await check_limits(db_session, tenant.id, "users", 2)


@pytest.mark.asyncio
async def test_client_limit(db_session, plans, make_tenant, add_owners):
    tenant = await make_tenant(plan="Trial")
    await add_owners(tenant.id, 10)

    with pytest.raises(QuotaExceededError) as exc_info:
        await check_limits(db_session, tenant.id, "clients", 1)
    assert exc_info.value.limit == 10
    assert "10 clients max" in str(exc_info.value)


@pytest.mark.asyncio
async def test_unlimited_clients(db_session, plans, make_tenant, add_owners):
    tenant = await make_tenant(plan="Standard")
    await add_owners(tenant.id, 60)

    await check_limits(db_session, tenant.id, "clients", 1)


@pytest.mark.asyncio
async def test_counts_are_read_fresh(db_session, plans, make_tenant, add_users):
    tenant = await make_tenant(plan="Starter")
    await add_users(tenant.id, 1)
    await check_limits(db_session, tenant.id, "users", 1)

    await add_users(tenant.id, 1)
    with pytest.raises(QuotaExceededError):
        await check_limits(db_session, tenant.id, "users", 1)


@pytest.mark.asyncio
async def test_storage_boundary(db_session, plans, make_tenant):
    tenant = await make_tenant(plan="Starter", storage_used=2047)

    await check_limits(db_session, tenant.id, "storage", 1)

    with pytest.raises(QuotaExceededError) as exc_info:
        await check_limits(db_session, tenant.id, "storage", 2)
    assert exc_info.value.resource_type == "storage"
    assert exc_info.value.limit == 2
    assert str(exc_info.value) == "Storage quota exceeded (2GB limit)."


@pytest.mark.asyncio
async def test_fractional_storage_limit(db_session, plans, make_tenant):
    tenant = await make_tenant(plan="Trial", storage_used=500)

    await check_limits(db_session, tenant.id, "storage", 12)
    with pytest.raises(QuotaExceededError, match=r"0\.5GB limit"):
        await check_limits(db_session, tenant.id, "storage", 13)


@pytest.mark.asyncio
async def test_missing_storage_limit_defaults_to_one_gigabyte(db_session, plans, make_tenant, session_factory):
    async with session_factory() as session:
        session.add(Plan(id="Basic", name="Basic", limits={"maxUsers": 1, "maxClients": 1}))
        await session.commit()
    tenant = await make_tenant(plan="Basic", storage_used=1000)

    await check_limits(db_session, tenant.id, "storage", 24)
    with pytest.raises(QuotaExceededError, match="1GB limit"):
        await check_limits(db_session, tenant.id, "storage", 25)


@pytest.mark.asyncio
async def test_missing_plan_fails_open(db_session, plans, make_tenant, add_users, caplog):
    tenant = await make_tenant(plan="Enterprise", storage_used=10 ** 9)
    await add_users(tenant.id, 50)

    with caplog.at_level(logging.WARNING, logger="src.services.quota_service"):
        for resource in RESOURCES:
            result = await check_limits(db_session, tenant.id, resource, 10 ** 6)
            assert result.id == tenant.id

    warnings = [r for r in caplog.records if "Enterprise" in r.getMessage()]
    assert len(warnings) == len(RESOURCES)


@pytest.mark.asyncio
async def test_invalid_resource_type(db_session, plans, make_tenant):
    tenant = await make_tenant()

    with pytest.raises(ValueError):
        await check_limits(db_session, tenant.id, "patients", 1)


@pytest.mark.asyncio
async def test_check_feature(db_session, plans, make_tenant):
    starter = await make_tenant(plan="Starter")
    premium = await make_tenant(plan="Premium")

    await check_feature(db_session, starter.id, "pos")
    with pytest.raises(FeatureNotAvailableError) as exc_info:
        await check_feature(db_session, starter.id, "reports")
    assert exc_info.value.plan_id == "Starter"

    await check_feature(db_session, premium.id, "multiBranch")


@pytest.mark.asyncio
async def test_usage_snapshot(db_session, plans, make_tenant, add_users, add_owners):
    tenant = await make_tenant(plan="Standard", storage_used=12.5)
    await add_users(tenant.id, 3)
    await add_owners(tenant.id, 4)

    usage = (await get_usage(db_session, tenant.id)).to_dict()

    assert usage["plan"] == "Standard"
    assert usage["usage"] == {"users": 3, "clients": 4, "storage_mb": 12.5}
    assert usage["limits"] == {"max_users": 7, "max_clients": -1, "max_storage_mb": 10240}
    assert "multiBranch" not in usage["modules"]
    assert "lab" in usage["modules"]
