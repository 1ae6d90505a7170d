"""Clinic reports, available on plans that include the reports module."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant_id, require_module
from src.core.database import get_db_session
from src.models.audit_log import AuditLog
from src.models.pet import Pet
from src.models.tenant import Tenant
from src.services.quota_service import get_usage

router = APIRouter()


@router.get("/summary")
async def summary_report(
    tenant: Tenant = Depends(require_module("reports")),
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Headline counts of the clinic and its activity per audit category."""
    usage = await get_usage(session, tenant_id)
    patients = await session.execute(
        select(func.count()).select_from(Pet).where(Pet.tenant_id == tenant_id)
    )
    activity = await session.execute(
        select(AuditLog.type, func.count())
        .where(AuditLog.tenant_id == tenant_id)
        .group_by(AuditLog.type)
    )
    return {
        "data": {
            "type": "report",
            "id": f"{tenant.id}-summary",
            "attributes": {
                "clinic": tenant.name,
                "plan": tenant.plan,
                "staff": usage.users,
                "clients": usage.clients,
                "patients": patients.scalar_one(),
                "storage_mb": usage.storage_used_mb,
                "activity": {category: count for category, count in activity.all()},
            },
        }
    }
