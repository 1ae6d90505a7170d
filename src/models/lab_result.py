"""Lab result model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow


class LabResult(BaseModel):
    """Diagnostic test ordered for a patient, available with the lab module."""

    __tablename__ = "lab_results"

    pet_id = Column(
        String(36),
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Patient the test was run for"
    )
    type = Column(
        String(100),
        nullable=False,
        default="General",
        comment="Test category, e.g. Hematology"
    )
    test_name = Column(String(255))
    result = Column(Text)
    status = Column(
        String(20),
        nullable=False,
        default="Pending",
        comment="Pending or Completed"
    )
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    pet = relationship("Pet", lazy="select")
