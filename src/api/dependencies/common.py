"""Common FastAPI dependencies."""

from typing import Optional

import httpx
from fastapi import Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db_session
from src.core.settings import get_settings
from src.models.tenant import Tenant
from src.services.audit import AuditLogger, get_audit_logger
from src.services.quota_service import check_feature
from src.services.tenant_service import TenantService


def get_current_tenant_id(request: Request) -> str:
    """Get current tenant ID from request."""
    tenant_id = getattr(request.state, "tenant_id", None)
    if not tenant_id:
        raise HTTPException(
            status_code=400,
            detail="Missing tenant context"
        )
    return tenant_id


def get_current_user_id(request: Request) -> str:
    """Get current user ID from request."""
    # For development with DISABLE_AUTH=true, fall back to a default user ID
    settings = get_settings()
    if settings.disable_auth:
        return getattr(request.state, "user_id", None) or "dev-user-id"

    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail="User not authenticated"
        )
    return user_id


def get_pagination_params(
    page: int = Query(1, ge=1, le=1000, description="Page number"),
    per_page: int = Query(25, ge=1, le=100, description="Items per page"),
) -> dict:
    """Get pagination parameters from query string."""
    return {
        "page": page,
        "per_page": per_page,
        "offset": (page - 1) * per_page,
        "limit": per_page,
    }


def get_payment_client() -> Optional[httpx.AsyncClient]:
    """HTTP client for the payment gateway; None opens one per call."""
    return None


def get_tenant_service(
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
    payment_client: Optional[httpx.AsyncClient] = Depends(get_payment_client),
) -> TenantService:
    """Get tenant service instance."""
    return TenantService(session, audit_logger, payment_client=payment_client)


def require_module(module: str):
    """Dependency to require a feature module on the tenant's plan."""
    async def module_checker(
        tenant_id: str = Depends(get_current_tenant_id),
        session: AsyncSession = Depends(get_db_session),
    ) -> Tenant:
        return await check_feature(session, tenant_id, module)
    return module_checker
