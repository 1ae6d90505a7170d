"""Owner (client) schemas."""

from typing import Optional

from pydantic import EmailStr, Field

from .base import BaseSchema


class OwnerAttributes(BaseSchema):
    """Attributes for registering a client."""

    name: str = Field(min_length=1, max_length=255, description="Owner full name")
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=1000)


class OwnerResource(BaseSchema):
    type: str = Field("owner", description="Resource type")
    attributes: OwnerAttributes


class OwnerCreateRequest(BaseSchema):
    data: OwnerResource


class OwnerPortalRequest(BaseSchema):
    """Enable or disable a client's portal access."""

    is_active: bool = Field(description="Whether the client may sign in to the portal")
    password: Optional[str] = Field(None, min_length=8, max_length=128)
