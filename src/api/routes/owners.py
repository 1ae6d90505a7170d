"""Owner (client) endpoints, including client file uploads and portal access."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_pagination_params,
)
from src.core.database import get_db_session, get_session_factory
from src.middleware.auth import get_password_hash
from src.models.client_upload import ClientUpload
from src.models.owner import Owner
from src.schemas.base import JSONAPICollectionResponse, JSONAPIResponse, to_resource
from src.schemas.owner import OwnerCreateRequest, OwnerPortalRequest
from src.schemas.upload import UploadCreateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger
from src.services.quota_service import RESOURCE_CLIENTS, RESOURCE_STORAGE, check_limits
from src.services.storage import track_storage

logger = logging.getLogger(__name__)
router = APIRouter()


async def get_tenant_owner(session: AsyncSession, tenant_id: str, owner_id: str) -> Owner:
    """Load an owner of the tenant; other tenants' owners are reported as missing."""
    result = await session.execute(
        select(Owner).where(Owner.id == owner_id, Owner.tenant_id == tenant_id)
    )
    owner = result.scalar_one_or_none()
    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "OWNER_NOT_FOUND", "message": "Owner not found"},
        )
    return owner


@router.get("", response_model=JSONAPICollectionResponse)
async def list_owners(
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    result = await session.execute(
        select(Owner)
        .where(Owner.tenant_id == tenant_id)
        .order_by(Owner.name)
        .offset(pagination["offset"])
        .limit(pagination["limit"])
    )
    owners = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("owner", owner) for owner in owners],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def create_owner(
    request: OwnerCreateRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Register a client; counts against the plan's client limit."""
    await check_limits(session, tenant_id, RESOURCE_CLIENTS, 1)

    owner = Owner(tenant_id=tenant_id, **request.data.attributes.model_dump())
    session.add(owner)
    await session.commit()

    audit_logger.create_log(tenant_id, actor, "Created Client", AuditCategory.CLINICAL, f"Client: {owner.name}")
    return JSONAPIResponse(data=to_resource("owner", owner))


@router.get("/{owner_id}", response_model=JSONAPIResponse)
async def get_owner(
    owner_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
):
    owner = await get_tenant_owner(session, tenant_id, owner_id)
    return JSONAPIResponse(data=to_resource("owner", owner))


@router.get("/{owner_id}/uploads", response_model=JSONAPICollectionResponse)
async def list_owner_uploads(
    owner_id: str,
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
):
    await get_tenant_owner(session, tenant_id, owner_id)
    result = await session.execute(
        select(ClientUpload)
        .where(ClientUpload.tenant_id == tenant_id, ClientUpload.owner_id == owner_id)
        .order_by(ClientUpload.uploaded_at.desc())
    )
    uploads = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("upload", upload) for upload in uploads],
        meta={"total": len(uploads)},
    )


@router.post(
    "/{owner_id}/uploads",
    response_model=JSONAPIResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_owner_upload(
    owner_id: str,
    request: UploadCreateRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Record a file already stored in object storage against a client.

    The size is checked against the storage quota first and added to the
    tenant's usage once the record is saved.
    """
    attributes = request.data.attributes
    await check_limits(session, tenant_id, RESOURCE_STORAGE, attributes.size_mb)
    owner = await get_tenant_owner(session, tenant_id, owner_id)

    upload = ClientUpload(tenant_id=tenant_id, owner_id=owner.id, **attributes.model_dump())
    session.add(upload)
    await session.commit()

    await track_storage(session_factory, tenant_id, attributes.size_mb)
    audit_logger.create_log(
        tenant_id, actor, "Uploaded File", AuditCategory.CLINICAL,
        f"File: {upload.file_name} ({upload.size_mb:g} MB) for {owner.name}",
    )
    return JSONAPIResponse(data=to_resource("upload", upload))


@router.patch("/{owner_id}/portal", response_model=JSONAPIResponse)
async def set_owner_portal(
    owner_id: str,
    request: OwnerPortalRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Enable or disable a client's portal access.

    A password, when given, replaces the client's portal credentials.
    """
    owner = await get_tenant_owner(session, tenant_id, owner_id)
    owner.is_portal_active = request.is_active
    if request.password:
        owner.password_hash = get_password_hash(request.password)
    await session.commit()

    action = "Enabled Client Portal" if request.is_active else "Disabled Client Portal"
    audit_logger.create_log(tenant_id, actor, action, AuditCategory.SECURITY, f"Client: {owner.name}")
    return JSONAPIResponse(data=to_resource("owner", owner))
