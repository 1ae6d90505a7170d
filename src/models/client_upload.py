"""Client upload model: documents and media attached to an owner."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow


class ClientUpload(BaseModel):
    """
    Metadata of a file stored in external object storage.

    ``size_mb`` is what the upload consumed from the tenant's storage quota
    and what is reclaimed when the upload is deleted.
    """

    __tablename__ = "client_uploads"

    owner_id = Column(
        String(36),
        ForeignKey("owners.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    file_type = Column(String(100), nullable=False)
    size_mb = Column(
        Float,
        nullable=False,
        default=0.0,
        comment="File size in megabytes"
    )
    notes = Column(Text)
    uploaded_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    owner = relationship("Owner", back_populates="uploads", lazy="select")
