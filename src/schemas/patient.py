"""Patient (pet) schemas."""

from typing import Optional

from pydantic import Field

from .base import BaseSchema


class PatientAttributes(BaseSchema):
    """Attributes for registering a patient."""

    owner_id: str = Field(description="Owner of the animal")
    name: str = Field(min_length=1, max_length=255)
    species: str = Field(min_length=1, max_length=100)
    breed: Optional[str] = Field(None, max_length=100)
    gender: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=100)
    age: int = Field(0, ge=0, le=100, description="Age in years")


class PatientResource(BaseSchema):
    type: str = Field("patient", description="Resource type")
    attributes: PatientAttributes


class PatientCreateRequest(BaseSchema):
    data: PatientResource
