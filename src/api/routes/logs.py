"""Audit trail endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant_id
from src.core.database import get_db_session
from src.models.audit_log import AuditLog
from src.schemas.base import JSONAPICollectionResponse, to_resource

router = APIRouter()

LOG_PAGE_SIZE = 100


@router.get("", response_model=JSONAPICollectionResponse)
async def list_logs(
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
):
    """Latest audit entries of the clinic, newest first."""
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.tenant_id == tenant_id)
        .order_by(AuditLog.timestamp.desc())
        .limit(LOG_PAGE_SIZE)
    )
    entries = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("log", entry) for entry in entries],
        meta={"total": len(entries)},
    )
