"""Tenant lifecycle: signup, plan changes and billing-driven status transitions.

Payment verification is the gate for every plan activation. Status changes
and plan switches are single-row UPDATE statements so they never overwrite
a concurrent storage increment with a stale in-memory value.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import httpx
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import Settings, get_settings
from src.middleware.auth import get_password_hash, verify_password
from src.models.plan import Plan
from src.models.tenant import Tenant, TenantStatus
from src.models.user import User
from src.services.audit import AuditCategory, AuditLogger
from src.services.payments import verify_payment

logger = logging.getLogger(__name__)

CURRENCY_BY_COUNTRY = {
    "Nigeria": "NGN",
}
DEFAULT_CURRENCY = "USD"


class TenantServiceError(Exception):
    """Base exception for tenant service errors."""
    pass


class TenantNotFoundError(TenantServiceError):
    """Raised when a tenant cannot be found."""
    pass


class PlanNotFoundError(TenantServiceError):
    """Raised when a requested plan does not exist."""
    pass


class PaymentVerificationError(TenantServiceError):
    """Raised when the payment reference could not be verified."""
    pass


class EmailAlreadyExistsError(TenantServiceError):
    """Raised when a signup or staff email is already registered."""
    pass


class InvalidCredentialsError(TenantServiceError):
    """Raised on unknown email or wrong password."""
    pass


class UserSuspendedError(TenantServiceError):
    """Raised when a suspended user tries to log in."""
    pass


class TenantService:
    """Business logic for tenant accounts and their subscriptions."""

    def __init__(
        self,
        db_session: AsyncSession,
        audit_logger: AuditLogger,
        settings: Optional[Settings] = None,
        payment_client: Optional[httpx.AsyncClient] = None,
    ):
        self.db = db_session
        self.audit = audit_logger
        self.settings = settings or get_settings()
        self.payment_client = payment_client

    async def get_tenant(self, tenant_id: str) -> Tenant:
        tenant = await self.db.get(Tenant, tenant_id, populate_existing=True)
        if tenant is None:
            raise TenantNotFoundError(f"Tenant {tenant_id} not found")
        return tenant

    async def _require_plan(self, plan_id: str) -> Plan:
        plan = await self.db.get(Plan, plan_id)
        if plan is None:
            raise PlanNotFoundError(f"Plan {plan_id} not found")
        return plan

    async def _verify(self, payment_ref: Optional[str]) -> None:
        if not payment_ref or not await verify_payment(
            payment_ref, settings=self.settings, client=self.payment_client
        ):
            raise PaymentVerificationError("Payment could not be verified")

    async def signup(self, signup_data: Dict[str, Any]) -> Tuple[Tenant, User]:
        """
        Register a clinic and its first administrator.

        Args:
            signup_data: name, email, password, clinic_name, plan,
                billing_period, country, payment_ref

        Raises:
            PlanNotFoundError: unknown plan
            PaymentVerificationError: payment reference rejected
            EmailAlreadyExistsError: email already registered
        """
        email = signup_data["email"].lower()
        plan = await self._require_plan(signup_data.get("plan") or "Trial")

        existing = await self.db.execute(select(User.id).where(User.email == email))
        if existing.first() is not None:
            raise EmailAlreadyExistsError(f"Email {email} is already registered")

        await self._verify(signup_data.get("payment_ref"))

        currency = CURRENCY_BY_COUNTRY.get(signup_data.get("country") or "", DEFAULT_CURRENCY)
        tenant = Tenant(
            name=signup_data["clinic_name"],
            plan=plan.id,
            billing_period=signup_data.get("billing_period") or "monthly",
            status=TenantStatus.ACTIVE,
            storage_used=0.0,
            settings={"currency": currency, "locale": signup_data.get("locale") or "en"},
        )
        self.db.add(tenant)
        await self.db.flush()

        user = User(
            tenant_id=tenant.id,
            name=signup_data["name"],
            email=email,
            password_hash=get_password_hash(signup_data["password"]),
            roles=["Admin"],
            is_verified=True,
        )
        self.db.add(user)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Database integrity error during signup: {e}")
            raise EmailAlreadyExistsError(f"Email {email} is already registered")

        logger.info(f"Registered tenant {tenant.id} on plan {plan.id}")
        self.audit.create_log(tenant.id, user.id, "Signup", AuditCategory.ADMIN, f"Plan: {plan.id}")
        return tenant, user

    async def authenticate(self, email: str, password: str) -> Tuple[User, Tenant]:
        result = await self.db.execute(
            select(User)
            .where(User.email == email.lower())
            .execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials")
        if user.is_suspended:
            raise UserSuspendedError("Account suspended")

        tenant = await self.get_tenant(user.tenant_id)
        self.audit.create_log(tenant.id, user.id, "Login", AuditCategory.SECURITY)
        return user, tenant

    async def change_plan(
        self,
        tenant_id: str,
        plan_id: str,
        payment_ref: str,
        actor: str,
        billing_period: Optional[str] = None,
    ) -> Tenant:
        """
        Verify a payment and move the tenant to ``plan_id``.

        A successful payment also lifts any Restricted/Suspended status.
        """
        await self.get_tenant(tenant_id)
        plan = await self._require_plan(plan_id)
        await self._verify(payment_ref)

        values = {"plan": plan.id, "status": TenantStatus.ACTIVE}
        if billing_period:
            values["billing_period"] = billing_period
        await self.db.execute(update(Tenant).where(Tenant.id == tenant_id).values(**values))
        await self.db.commit()

        logger.info(f"Tenant {tenant_id} moved to plan {plan.id}")
        self.audit.create_log(
            tenant_id, actor, "Plan Changed", AuditCategory.FINANCIAL,
            f"Plan: {plan.id}, Ref: {payment_ref}",
        )
        return await self.get_tenant(tenant_id)

    async def set_status(self, tenant_id: str, new_status: str, actor: str, reason: str = "") -> Tenant:
        """Apply a billing-driven status transition."""
        if new_status not in TenantStatus.ALL:
            raise TenantServiceError(f"Status must be one of: {TenantStatus.ALL}")

        tenant = await self.get_tenant(tenant_id)
        old_status = tenant.status
        await self.db.execute(
            update(Tenant).where(Tenant.id == tenant_id).values(status=new_status)
        )
        await self.db.commit()

        logger.info(f"Tenant {tenant_id} status {old_status} -> {new_status}")
        self.audit.create_log(
            tenant_id, actor, "Status Changed", AuditCategory.ADMIN,
            f"{old_status} -> {new_status}" + (f": {reason}" if reason else ""),
        )
        return await self.get_tenant(tenant_id)
