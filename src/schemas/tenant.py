"""Tenant and subscription schemas."""

from typing import Optional

from pydantic import Field, field_validator

from .base import BaseSchema


class SubscriptionChangeRequest(BaseSchema):
    """Move the current tenant to another plan after payment."""

    plan: str = Field(min_length=1, description="Target plan id")
    payment_ref: str = Field(min_length=1, description="Payment gateway transaction reference")
    billing_period: Optional[str] = Field(None, description="monthly or yearly")

    @field_validator("billing_period")
    @classmethod
    def validate_billing_period(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in {"monthly", "yearly"}:
            raise ValueError("Billing period must be 'monthly' or 'yearly'")
        return v


class TenantStatusRequest(BaseSchema):
    """Billing-driven status transition."""

    status: str = Field(description="Active, Restricted or Suspended")
    reason: str = Field("", max_length=500)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        valid_statuses = {"Active", "Restricted", "Suspended"}
        if v not in valid_statuses:
            raise ValueError(f"Status must be one of: {valid_statuses}")
        return v
