"""Patient (pet) endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_pagination_params,
)
from src.api.routes.owners import get_tenant_owner
from src.core.database import get_db_session
from src.models.pet import Pet
from src.schemas.base import JSONAPICollectionResponse, JSONAPIResponse, to_resource
from src.schemas.patient import PatientCreateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=JSONAPICollectionResponse)
async def list_patients(
    owner_id: Optional[str] = Query(None, description="Only patients of this owner"),
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    query = select(Pet).where(Pet.tenant_id == tenant_id)
    if owner_id:
        query = query.where(Pet.owner_id == owner_id)
    result = await session.execute(
        query.order_by(Pet.name).offset(pagination["offset"]).limit(pagination["limit"])
    )
    pets = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("patient", pet) for pet in pets],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    request: PatientCreateRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Register a patient under one of the clinic's owners."""
    attributes = request.data.attributes
    owner = await get_tenant_owner(session, tenant_id, attributes.owner_id)

    pet = Pet(tenant_id=tenant_id, **attributes.model_dump())
    session.add(pet)
    await session.commit()

    audit_logger.create_log(
        tenant_id, actor, "Created Patient", AuditCategory.CLINICAL,
        f"Patient: {pet.name} ({pet.species}), Owner: {owner.name}",
    )
    return JSONAPIResponse(data=to_resource("patient", pet))
