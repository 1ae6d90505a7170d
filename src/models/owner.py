"""Owner model: the clinic's clients."""

from sqlalchemy import Boolean, Column, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Owner(BaseModel):
    """
    Pet owner. Owners are the "clients" counted against ``maxClients``.
    """

    __tablename__ = "owners"

    name = Column(
        String(255),
        nullable=False,
        comment="Owner full name"
    )
    phone = Column(
        String(50),
        comment="Primary phone number"
    )
    email = Column(
        String(255),
        comment="Primary email address"
    )
    address = Column(
        Text,
        comment="Postal address"
    )
    is_portal_active = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Client portal access enabled"
    )
    password_hash = Column(
        String(255),
        comment="Client portal password hash"
    )

    pets = relationship("Pet", back_populates="owner", lazy="select")
    uploads = relationship("ClientUpload", back_populates="owner", lazy="select")

    def to_dict(self):
        data = super().to_dict()
        data.pop("password_hash", None)
        return data
