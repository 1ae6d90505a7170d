"""Subscription plan model."""

from sqlalchemy import Column, Numeric, String

from .base import TimestampMixin
from src.core.database import Base, JSONType


class Plan(Base, TimestampMixin):
    """
    Subscription tier with prices, marketing features and a limits payload.

    ``limits`` is stored as an opaque document:
    ``{"maxUsers", "maxClients", "maxStorageGB", "modules": {...}}`` and is
    interpreted by :class:`src.services.plans.PlanLimits`.
    """

    __tablename__ = "plans"

    id = Column(
        String(50),
        primary_key=True,
        comment="Plan identifier, e.g. Trial, Starter"
    )
    name = Column(
        String(100),
        nullable=False,
        comment="Display name"
    )
    price_monthly = Column(
        Numeric(12, 2),
        nullable=False,
        default=0,
        comment="Monthly price"
    )
    price_yearly = Column(
        Numeric(12, 2),
        nullable=False,
        default=0,
        comment="Yearly price"
    )
    features = Column(
        JSONType,
        default=list,
        comment="Human-readable feature strings"
    )
    limits = Column(
        JSONType,
        default=dict,
        comment="Quota and module limits"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price_monthly": float(self.price_monthly or 0),
            "price_yearly": float(self.price_yearly or 0),
            "features": list(self.features or []),
            "limits": dict(self.limits or {}),
        }

    def __repr__(self) -> str:
        return f"<Plan(id='{self.id}', name='{self.name}')>"
