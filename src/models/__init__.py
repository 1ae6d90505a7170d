"""Database models for the veterinary clinic service."""

from .base import BaseModel, TimestampMixin
from .tenant import Tenant, TenantStatus
from .plan import Plan
from .user import User
from .owner import Owner
from .pet import Pet
from .client_upload import ClientUpload
from .lab_result import LabResult
from .inventory import InventoryItem, SaleRecord
from .audit_log import AuditLog

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Tenant",
    "TenantStatus",
    "Plan",
    "User",
    "Owner",
    "Pet",
    "ClientUpload",
    "LabResult",
    "InventoryItem",
    "SaleRecord",
    "AuditLog",
]
