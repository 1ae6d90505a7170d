"""Startup seeding of reference data."""

import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import Settings
from src.middleware.auth import get_password_hash
from src.models.tenant import Tenant
from src.models.user import User
from src.services.plans import DEFAULT_PLANS, seed_plans

logger = logging.getLogger(__name__)

# Not part of the catalog: the system tenant resolves to no plan and is
# therefore never quota-limited.
SYSTEM_PLAN = "Enterprise"


async def seed_system_tenant(session: AsyncSession, settings: Settings) -> Tenant:
    tenant = await session.get(Tenant, settings.system_tenant_id)
    if tenant is None:
        tenant = Tenant(
            id=settings.system_tenant_id,
            name="System Admin",
            plan=SYSTEM_PLAN,
            settings={"currency": "USD"},
            storage_used=0.0,
        )
        session.add(tenant)
        await session.commit()
        logger.info("Created system tenant")
    return tenant


async def seed_superadmin(session: AsyncSession, settings: Settings, tenant: Tenant) -> Optional[User]:
    if not settings.superadmin_email or not settings.superadmin_password:
        logger.info("No super admin configured, skipping")
        return None

    email = settings.superadmin_email.lower()
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(
            tenant_id=tenant.id,
            name="Super Admin",
            email=email,
            password_hash=get_password_hash(settings.superadmin_password),
            roles=["SuperAdmin"],
            is_verified=True,
            is_suspended=False,
        )
        session.add(user)
        await session.commit()
        logger.info(f"Created super admin {email}")
    return user


async def bootstrap(
    session: AsyncSession,
    settings: Settings,
    catalog: Iterable[Dict[str, Any]] = DEFAULT_PLANS,
) -> None:
    """Seed plans, the system tenant and the super admin. Idempotent."""
    await seed_plans(session, catalog)
    tenant = await seed_system_tenant(session, settings)
    await seed_superadmin(session, settings, tenant)
