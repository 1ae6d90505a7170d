"""Staff user model."""

from sqlalchemy import Boolean, Column, Index, String

from .base import BaseModel
from src.core.database import JSONType


class User(BaseModel):
    """
    Clinic staff member (veterinarian, receptionist, administrator).

    Users count against the ``maxUsers`` limit of the tenant's plan.
    """

    __tablename__ = "users"

    name = Column(
        String(255),
        nullable=False,
        comment="Display name"
    )
    email = Column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email, unique across the platform"
    )
    password_hash = Column(
        String(255),
        nullable=False,
        comment="Bcrypt password hash"
    )
    roles = Column(
        JSONType,
        default=lambda: ["Veterinarian"],
        comment="Role names, e.g. Admin, Veterinarian, SuperAdmin"
    )
    is_verified = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Email verified"
    )
    is_suspended = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="Login disabled"
    )

    __table_args__ = (
        Index("idx_users_tenant_email", "tenant_id", "email"),
    )

    def to_dict(self):
        data = super().to_dict()
        data.pop("password_hash", None)
        return data

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
