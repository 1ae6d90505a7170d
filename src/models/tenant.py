"""Tenant model for multi-tenant isolation."""

from sqlalchemy import CheckConstraint, Column, Float, Index, String

from .base import TimestampMixin, generate_id
from src.core.database import Base, JSONType


class TenantStatus:
    """Account status values driven by billing events."""

    ACTIVE = "Active"
    RESTRICTED = "Restricted"
    SUSPENDED = "Suspended"

    ALL = (ACTIVE, RESTRICTED, SUSPENDED)
    BLOCKED = (RESTRICTED, SUSPENDED)


class Tenant(Base, TimestampMixin):
    """
    Tenant model representing a veterinary clinic.
    All other entities belong to a tenant for data isolation.

    Tenants are never hard-deleted; their lifecycle is expressed through
    ``status``.
    """

    __tablename__ = "tenants"

    id = Column(
        String(36),
        primary_key=True,
        default=generate_id,
        comment="Primary key"
    )

    name = Column(
        String(255),
        nullable=False,
        comment="Clinic display name"
    )

    # Subscription. Not a foreign key: a dangling plan id is tolerated by the
    # quota checker and treated as unlimited.
    plan = Column(
        String(50),
        nullable=False,
        default="Trial",
        comment="Subscription plan id (plans.id)"
    )
    billing_period = Column(
        String(10),
        nullable=False,
        default="monthly",
        comment="Billing period: monthly, yearly"
    )
    status = Column(
        String(20),
        nullable=False,
        default=TenantStatus.ACTIVE,
        comment="Account status: Active, Restricted, Suspended"
    )

    storage_used = Column(
        Float,
        nullable=False,
        default=0.0,
        comment="Cumulative storage used in megabytes"
    )

    settings = Column(
        JSONType,
        default=dict,
        comment="Tenant settings (currency, locale)"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('Active', 'Restricted', 'Suspended')",
            name="valid_tenant_status"
        ),
        CheckConstraint(
            "billing_period IN ('monthly', 'yearly')",
            name="valid_billing_period"
        ),
        Index("idx_tenants_status", "status"),
    )

    @property
    def is_blocked(self) -> bool:
        """True when the account status forbids quota-gated operations."""
        return self.status in TenantStatus.BLOCKED

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "plan": self.plan,
            "billing_period": self.billing_period,
            "status": self.status,
            "storage_used": self.storage_used,
            "settings": dict(self.settings or {}),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', plan='{self.plan}')>"
