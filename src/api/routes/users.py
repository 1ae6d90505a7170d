"""Staff user endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_pagination_params,
)
from src.core.database import get_db_session
from src.middleware.auth import get_password_hash, require_role
from src.models.user import User
from src.schemas.base import JSONAPICollectionResponse, JSONAPIResponse, to_resource
from src.schemas.staff import StaffCreateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger
from src.services.quota_service import RESOURCE_USERS, check_limits

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=JSONAPICollectionResponse)
async def list_users(
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    result = await session.execute(
        select(User)
        .where(User.tenant_id == tenant_id)
        .order_by(User.created_at)
        .offset(pagination["offset"])
        .limit(pagination["limit"])
    )
    users = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("user", user) for user in users],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: StaffCreateRequest,
    _: bool = Depends(require_role("Admin")),
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Add a staff member to the clinic.

    Counts against the plan's user limit; an account that is Restricted or
    Suspended cannot add staff.
    """
    await check_limits(session, tenant_id, RESOURCE_USERS, 1)

    attributes = request.data.attributes
    user = User(
        tenant_id=tenant_id,
        name=attributes.name,
        email=attributes.email.lower(),
        password_hash=get_password_hash(attributes.password),
        roles=attributes.roles,
        is_verified=False,
        is_suspended=False,
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "EMAIL_ALREADY_EXISTS", "message": f"Email {attributes.email} is already registered"},
        )

    audit_logger.create_log(tenant_id, actor, "Created User", AuditCategory.ADMIN, f"User: {user.email}")
    return JSONAPIResponse(data=to_resource("user", user))
