"""Tenant quota enforcement against subscription plan limits.

The checker is a read-then-decide operation: it counts usage, compares it
with the plan and returns. It takes no lock and the caller's subsequent
write is not part of the same transaction, so two concurrent requests for
the same tenant can both pass and jointly overshoot a ceiling. Quotas are
soft limits; closing the window would need a conditional increment on a
running counter performed in a single statement.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.owner import Owner
from src.models.plan import Plan
from src.models.tenant import Tenant
from src.models.user import User
from src.services.plans import UNLIMITED, PlanLimits

logger = logging.getLogger(__name__)

RESOURCE_STORAGE = "storage"
RESOURCE_USERS = "users"
RESOURCE_CLIENTS = "clients"
RESOURCE_TYPES = (RESOURCE_STORAGE, RESOURCE_USERS, RESOURCE_CLIENTS)


class QuotaServiceError(Exception):
    """Base exception for quota service errors."""
    pass


class TenantNotFoundError(QuotaServiceError):
    """Raised when a tenant id does not resolve to a record."""
    pass


class AccountRestrictedError(QuotaServiceError):
    """Raised when the tenant's account status forbids the operation."""

    def __init__(self, status: str):
        super().__init__("Account restricted. Please contact support or update payment.")
        self.status = status


class QuotaExceededError(QuotaServiceError):
    """Raised when an operation would cross a plan limit."""

    def __init__(self, message: str, resource_type: str, limit: Any):
        super().__init__(message)
        self.resource_type = resource_type
        self.limit = limit


class FeatureNotAvailableError(QuotaServiceError):
    """Raised when the tenant's plan does not include a feature module."""

    def __init__(self, module: str, plan_id: str):
        super().__init__(f"The {module} module is not included in the {plan_id} plan. Upgrade plan.")
        self.module = module
        self.plan_id = plan_id


@dataclass
class UsageSnapshot:
    """Current usage of a tenant next to its plan limits."""

    tenant_id: str
    plan_id: str
    status: str
    users: int
    clients: int
    storage_used_mb: float
    limits: Optional[PlanLimits] = None
    modules: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        limits = self.limits
        return {
            "tenant_id": self.tenant_id,
            "plan": self.plan_id,
            "status": self.status,
            "usage": {
                "users": self.users,
                "clients": self.clients,
                "storage_mb": self.storage_used_mb,
            },
            "limits": {
                "max_users": limits.max_users if limits else UNLIMITED,
                "max_clients": limits.max_clients if limits else UNLIMITED,
                "max_storage_mb": limits.max_storage_mb if limits else None,
            },
            "modules": self.modules,
        }


async def count_users(session: AsyncSession, tenant_id: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(User).where(User.tenant_id == tenant_id)
    )
    return result.scalar_one()


async def count_clients(session: AsyncSession, tenant_id: str) -> int:
    result = await session.execute(
        select(func.count()).select_from(Owner).where(Owner.tenant_id == tenant_id)
    )
    return result.scalar_one()


async def get_tenant_plan(session: AsyncSession, tenant: Tenant) -> Optional[Plan]:
    """Resolve the plan referenced by a tenant, or None when it is missing."""
    plan = await session.get(Plan, tenant.plan)
    if plan is None:
        logger.warning(
            f"Plan '{tenant.plan}' of tenant {tenant.id} not found; treating tenant as unlimited"
        )
    return plan


async def check_limits(
    session: AsyncSession,
    tenant_id: str,
    resource_type: str,
    increment_amount: float = 0,
) -> Tenant:
    """
    Decide whether ``tenant_id`` may consume ``increment_amount`` more units
    of ``resource_type`` (``storage`` in MB, ``users`` or ``clients``).

    Returns the tenant on success so callers can reuse it.

    Raises:
        TenantNotFoundError: unknown tenant
        AccountRestrictedError: tenant is Restricted or Suspended
        QuotaExceededError: the increment would cross the plan limit
    """
    if resource_type not in RESOURCE_TYPES:
        raise ValueError(f"Resource type must be one of: {RESOURCE_TYPES}")

    # Always read fresh, never from the identity map
    result = await session.execute(
        select(Tenant).where(Tenant.id == tenant_id).execution_options(populate_existing=True)
    )
    tenant = result.scalar_one_or_none()
    if tenant is None:
        raise TenantNotFoundError("Tenant not found")

    if tenant.is_blocked:
        logger.info(f"Tenant {tenant_id} blocked with status {tenant.status} ({resource_type})")
        raise AccountRestrictedError(tenant.status)

    plan = await get_tenant_plan(session, tenant)
    if plan is None:
        return tenant

    limits = PlanLimits.from_plan(plan)

    if resource_type == RESOURCE_STORAGE:
        if (tenant.storage_used or 0) + increment_amount > limits.max_storage_mb:
            raise QuotaExceededError(
                f"Storage quota exceeded ({limits.storage_gb_display:g}GB limit).",
                RESOURCE_STORAGE,
                limits.storage_gb_display,
            )

    elif resource_type == RESOURCE_USERS and limits.max_users != UNLIMITED:
        current = await count_users(session, tenant_id)
        if current + increment_amount > limits.max_users:
            raise QuotaExceededError(
                f"User limit reached ({limits.max_users} users max). Upgrade plan.",
                RESOURCE_USERS,
                limits.max_users,
            )

    elif resource_type == RESOURCE_CLIENTS and limits.max_clients != UNLIMITED:
        current = await count_clients(session, tenant_id)
        if current + increment_amount > limits.max_clients:
            raise QuotaExceededError(
                f"Client limit reached ({limits.max_clients} clients max). Upgrade plan.",
                RESOURCE_CLIENTS,
                limits.max_clients,
            )

    return tenant


async def check_feature(session: AsyncSession, tenant_id: str, module: str) -> Tenant:
    """
    Gate a feature module on the tenant's plan.

    Applies the same status gate and missing-plan policy as
    :func:`check_limits`.
    """
    tenant = await session.get(Tenant, tenant_id, populate_existing=True)
    if tenant is None:
        raise TenantNotFoundError("Tenant not found")
    if tenant.is_blocked:
        raise AccountRestrictedError(tenant.status)

    plan = await get_tenant_plan(session, tenant)
    if plan is None:
        return tenant

    if not PlanLimits.from_plan(plan).module_enabled(module):
        raise FeatureNotAvailableError(module, plan.id)
    return tenant


async def get_usage(session: AsyncSession, tenant_id: str) -> UsageSnapshot:
    """Current usage counters of a tenant alongside its plan limits."""
    tenant = await session.get(Tenant, tenant_id, populate_existing=True)
    if tenant is None:
        raise TenantNotFoundError("Tenant not found")

    plan = await session.get(Plan, tenant.plan)
    limits = PlanLimits.from_plan(plan) if plan else None

    return UsageSnapshot(
        tenant_id=tenant.id,
        plan_id=tenant.plan,
        status=tenant.status,
        users=await count_users(session, tenant_id),
        clients=await count_clients(session, tenant_id),
        storage_used_mb=tenant.storage_used or 0,
        limits=limits,
        modules=limits.enabled_modules() if limits else [],
    )
