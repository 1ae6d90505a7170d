"""Tests for the background audit logger."""

import logging

import pytest
from sqlalchemy import select

from src.models.audit_log import AuditLog
from src.services.audit import AuditCategory, AuditLogger


@pytest.mark.asyncio
async def test_create_log_returns_before_write(session_factory, make_tenant):
    tenant = await make_tenant()
    audit = AuditLogger(session_factory)

    result = audit.create_log(tenant.id, "user-1", "Created Patient", AuditCategory.CLINICAL, "Rex")

    assert result is None
    assert audit.pending == 1

    await audit.drain()

    async with session_factory() as session:
        entries = (await session.execute(select(AuditLog))).scalars().all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.tenant_id == tenant.id
    assert entry.user == "user-1"
    assert entry.action == "Created Patient"
    assert entry.type == "clinical"
    assert entry.details == "Rex"
    assert entry.timestamp is not None


@pytest.mark.asyncio
async def test_details_default_to_empty(session_factory, make_tenant):
    tenant = await make_tenant()
    audit = AuditLogger(session_factory)

    audit.create_log(tenant.id, "system", "Login", AuditCategory.SECURITY)
    await audit.drain()

    async with session_factory() as session:
        entry = (await session.execute(select(AuditLog))).scalar_one()
    assert entry.details == ""


@pytest.mark.asyncio
async def test_write_failure_is_reported_not_raised(caplog):
    def broken_factory():
        raise ConnectionError("database is down")

    audit = AuditLogger(broken_factory)

    with caplog.at_level(logging.ERROR, logger="src.services.audit"):
        audit.create_log("tenant-1", "user-1", "Deleted File", AuditCategory.CLINICAL)
        await audit.drain()

    assert audit.failures == 1
    assert audit.pending == 0
    assert "[LOG ERROR] Failed to log Deleted File" in caplog.text


def test_create_log_without_event_loop_is_reported(caplog):
    audit = AuditLogger(lambda: None)

    with caplog.at_level(logging.ERROR, logger="src.services.audit"):
        audit.create_log("tenant-1", "user-1", "Login", AuditCategory.SECURITY)

    assert audit.pending == 0
    assert "Failed to log Login" in caplog.text
