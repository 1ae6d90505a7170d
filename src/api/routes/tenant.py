"""Tenant account endpoints: usage, subscription and billing status."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_tenant_service,
)
from src.core.database import get_db_session
from src.middleware.auth import require_role
from src.middleware.logging import get_request_logger
from src.schemas.base import JSONAPIResponse, Resource, to_resource
from src.schemas.tenant import SubscriptionChangeRequest, TenantStatusRequest
from src.services.quota_service import get_usage
from src.services.tenant_service import (
    PaymentVerificationError,
    PlanNotFoundError,
    TenantService,
)

router = APIRouter()
admin_router = APIRouter()


@router.get("", response_model=JSONAPIResponse)
async def get_current_tenant(
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """The caller's clinic with live usage against its plan limits."""
    tenant = await tenant_service.get_tenant(tenant_id)
    usage = await get_usage(session, tenant_id)
    return JSONAPIResponse(
        data=to_resource("tenant", tenant, exclude=("id",)),
        meta=usage.to_dict(),
    )


@router.post("/subscription", response_model=JSONAPIResponse)
async def change_subscription(
    request: Request,
    subscription: SubscriptionChangeRequest,
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """
    Switch the clinic to another plan once the payment is verified.

    A verified payment also reactivates a Restricted or Suspended account.
    """
    request_logger = get_request_logger(request)
    try:
        tenant = await tenant_service.change_plan(
            tenant_id,
            subscription.plan,
            subscription.payment_ref,
            actor,
            billing_period=subscription.billing_period,
        )
    except PlanNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "INVALID_PLAN", "message": str(e)},
        )
    except PaymentVerificationError as e:
        request_logger.warning("Subscription payment rejected", plan=subscription.plan)
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"code": "PAYMENT_VERIFICATION_FAILED", "message": str(e)},
        )

    request_logger.info("Subscription changed", plan=tenant.plan)
    return JSONAPIResponse(data=to_resource("tenant", tenant, exclude=("id",)))


@admin_router.patch("/tenants/{tenant_id}/status", response_model=JSONAPIResponse)
async def update_tenant_status(
    tenant_id: str,
    status_request: TenantStatusRequest,
    _: bool = Depends(require_role("SuperAdmin")),
    actor: str = Depends(get_current_user_id),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Restrict, suspend or reactivate a clinic account."""
    tenant = await tenant_service.set_status(
        tenant_id, status_request.status, actor, status_request.reason
    )
    return JSONAPIResponse(
        data=Resource(type="tenant", id=tenant.id, attributes={"status": tenant.status, "plan": tenant.plan}),
    )
