"""Audit log model."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text

from .base import generate_id, utcnow
from src.core.database import Base


class AuditLog(Base):
    """
    Append-only record of a user action.

    Entries are written by :class:`src.services.audit.AuditLogger` and are
    never updated or deleted by the application.
    """

    __tablename__ = "logs"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(
        String(36),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    user = Column(
        String(255),
        nullable=False,
        comment="Actor identifier"
    )
    action = Column(String(255), nullable=False)
    type = Column(
        String(50),
        nullable=False,
        comment="Category tag: financial, clinical, admin, security"
    )
    details = Column(Text, nullable=False, default="")
    timestamp = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("idx_logs_tenant_timestamp", "tenant_id", "timestamp"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "user": self.user,
            "action": self.action,
            "type": self.type,
            "details": self.details,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action='{self.action}')>"
