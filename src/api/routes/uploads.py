"""Client upload endpoints outside an owner scope."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.dependencies.common import get_current_tenant_id, get_current_user_id
from src.core.database import get_db_session, get_session_factory
from src.models.client_upload import ClientUpload
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger
from src.services.storage import track_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.delete("/{upload_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_upload(
    upload_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Delete an upload record and give its size back to the storage quota."""
    result = await session.execute(
        select(ClientUpload).where(
            ClientUpload.id == upload_id, ClientUpload.tenant_id == tenant_id
        )
    )
    upload = result.scalar_one_or_none()
    if upload is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "UPLOAD_NOT_FOUND", "message": "Upload not found"},
        )

    size_mb = upload.size_mb or 0
    file_name = upload.file_name
    await session.delete(upload)
    await session.commit()

    await track_storage(session_factory, tenant_id, -size_mb)
    audit_logger.create_log(
        tenant_id, actor, "Deleted File", AuditCategory.CLINICAL, f"File: {file_name}"
    )
