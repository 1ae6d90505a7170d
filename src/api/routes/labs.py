"""Lab result endpoints, available on plans that include the lab module."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_pagination_params,
    require_module,
)
from src.core.database import get_db_session
from src.models.lab_result import LabResult
from src.models.pet import Pet
from src.models.tenant import Tenant
from src.schemas.base import JSONAPICollectionResponse, JSONAPIResponse, to_resource
from src.schemas.lab import LabResultCreateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=JSONAPICollectionResponse)
async def list_lab_results(
    pet_id: Optional[str] = Query(None, description="Only results of this patient"),
    tenant: Tenant = Depends(require_module("lab")),
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    query = select(LabResult).where(LabResult.tenant_id == tenant_id)
    if pet_id:
        query = query.where(LabResult.pet_id == pet_id)
    result = await session.execute(
        query.order_by(LabResult.created_at.desc())
        .offset(pagination["offset"])
        .limit(pagination["limit"])
    )
    lab_results = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("lab_result", lab_result) for lab_result in lab_results],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def create_lab_result(
    request: LabResultCreateRequest,
    tenant: Tenant = Depends(require_module("lab")),
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Record a lab test for one of the clinic's patients."""
    attributes = request.data.attributes
    pet = (await session.execute(
        select(Pet).where(Pet.id == attributes.pet_id, Pet.tenant_id == tenant_id)
    )).scalar_one_or_none()
    if pet is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PATIENT_NOT_FOUND", "message": "Patient not found"},
        )

    lab_result = LabResult(tenant_id=tenant_id, **attributes.model_dump())
    session.add(lab_result)
    await session.commit()

    audit_logger.create_log(
        tenant_id, actor, "Recorded Lab Result", AuditCategory.CLINICAL,
        f"Test: {lab_result.test_name or lab_result.type} for {pet.name}",
    )
    return JSONAPIResponse(data=to_resource("lab_result", lab_result))
