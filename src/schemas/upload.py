"""Client upload schemas."""

from typing import Optional

from pydantic import Field

from .base import BaseSchema


class UploadAttributes(BaseSchema):
    """Metadata of a file already stored in object storage."""

    file_name: str = Field(min_length=1, max_length=255)
    file_url: str = Field(min_length=1, description="Location in object storage")
    file_type: str = Field(min_length=1, max_length=100, description="MIME type")
    size_mb: float = Field(gt=0, description="File size in megabytes")
    notes: Optional[str] = None


class UploadResource(BaseSchema):
    type: str = Field("upload", description="Resource type")
    attributes: UploadAttributes


class UploadCreateRequest(BaseSchema):
    data: UploadResource
