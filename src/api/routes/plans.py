"""Subscription plan endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import get_current_tenant_id, get_current_user_id
from src.core.database import get_db_session
from src.middleware.auth import require_role
from src.models.plan import Plan
from src.schemas.base import to_resource
from src.schemas.plan import PlanCollectionResponse, PlanResponse, PlanUpdateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger
from src.services.plans import PlanLimits

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=PlanCollectionResponse)
async def list_plans(session: AsyncSession = Depends(get_db_session)):
    """Public plan catalog, cheapest first."""
    result = await session.execute(select(Plan).order_by(Plan.price_monthly))
    plans = result.scalars().all()
    return PlanCollectionResponse(
        data=[to_resource("plan", plan, exclude=("id",)) for plan in plans],
        meta={"total": len(plans)},
    )


@router.patch("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: str,
    request: PlanUpdateRequest,
    _: bool = Depends(require_role("SuperAdmin")),
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """Update prices, features or limits of a plan."""
    plan = await session.get(Plan, plan_id)
    if plan is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "PLAN_NOT_FOUND", "message": f"Plan {plan_id} not found"},
        )

    changes = request.data.attributes.model_dump(exclude_unset=True)
    if "limits" in changes:
        # Reject limits documents the quota checker could not read
        try:
            PlanLimits.model_validate(changes["limits"] or {})
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"code": "INVALID_PLAN_LIMITS", "message": str(e)},
            )

    for key, value in changes.items():
        setattr(plan, key, value)
    await session.commit()

    logger.info(f"Plan {plan_id} updated: {sorted(changes)}")
    audit_logger.create_log(
        tenant_id, actor, "Plan Updated", AuditCategory.ADMIN,
        f"Plan: {plan_id}, Fields: {', '.join(sorted(changes))}",
    )
    return PlanResponse(data=to_resource("plan", plan, exclude=("id",)))
