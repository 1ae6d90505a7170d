"""Staff user schemas."""

from typing import List

from pydantic import EmailStr, Field

from .base import BaseSchema


class StaffAttributes(BaseSchema):
    """Attributes for creating a staff user."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    roles: List[str] = Field(default_factory=lambda: ["Veterinarian"])


class StaffResource(BaseSchema):
    type: str = Field("user", description="Resource type")
    attributes: StaffAttributes


class StaffCreateRequest(BaseSchema):
    data: StaffResource
