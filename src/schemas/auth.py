"""Authentication and signup schemas."""

from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import BaseSchema, JSONAPIResponse


class SignupAttributes(BaseSchema):
    """Attributes for registering a clinic and its administrator."""

    name: str = Field(min_length=1, max_length=255, description="Administrator name")
    email: EmailStr = Field(description="Administrator login email")
    password: str = Field(min_length=8, max_length=128, description="Administrator password")
    clinic_name: str = Field(min_length=1, max_length=255, description="Clinic display name")
    plan: str = Field("Trial", description="Subscription plan id")
    billing_period: str = Field("monthly", description="Billing period: monthly, yearly")
    country: Optional[str] = Field(None, max_length=100, description="Country, drives the currency")
    locale: Optional[str] = Field("en", max_length=10, description="Preferred locale")
    payment_ref: Optional[str] = Field(None, description="Payment gateway transaction reference")

    @field_validator("billing_period")
    @classmethod
    def validate_billing_period(cls, v: str) -> str:
        valid_periods = {"monthly", "yearly"}
        if v not in valid_periods:
            raise ValueError(f"Billing period must be one of: {valid_periods}")
        return v


class SignupResource(BaseSchema):
    type: str = Field("signup", description="Resource type")
    attributes: SignupAttributes


class SignupRequest(BaseSchema):
    data: SignupResource


class LoginRequest(BaseSchema):
    """Credentials for staff login."""

    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(JSONAPIResponse):
    """Session response: user resource plus the bearer token in ``meta``."""
    pass
