"""Lab result schemas."""

from typing import Optional

from pydantic import Field, field_validator

from .base import BaseSchema


class LabResultAttributes(BaseSchema):
    """Attributes for recording a lab test."""

    pet_id: str = Field(description="Patient the test was run for")
    type: str = Field("General", min_length=1, max_length=100, description="Test category")
    test_name: Optional[str] = Field(None, max_length=255)
    result: Optional[str] = None
    status: str = Field("Pending", description="Pending or Completed")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        valid_statuses = {"Pending", "Completed"}
        if v not in valid_statuses:
            raise ValueError(f"Status must be one of: {valid_statuses}")
        return v


class LabResultResource(BaseSchema):
    type: str = Field("lab_result", description="Resource type")
    attributes: LabResultAttributes


class LabResultCreateRequest(BaseSchema):
    data: LabResultResource
