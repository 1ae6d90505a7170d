"""Pydantic schemas for request/response validation."""

from .base import *
from .auth import *
from .plan import *
from .staff import *
from .owner import *
from .patient import *
from .upload import *
from .lab import *
from .sale import *
from .tenant import *

__all__ = [
    # Base schemas
    "BaseSchema",
    "Resource",
    "JSONAPIResponse",
    "JSONAPICollectionResponse",
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "HealthCheckResponse",
    "to_resource",

    # Auth schemas
    "SignupAttributes",
    "SignupRequest",
    "LoginRequest",
    "TokenResponse",

    # Plan schemas
    "PlanUpdateAttributes",
    "PlanUpdateRequest",
    "PlanResponse",
    "PlanCollectionResponse",

    # Clinic resources
    "StaffAttributes",
    "StaffCreateRequest",
    "OwnerAttributes",
    "OwnerCreateRequest",
    "OwnerPortalRequest",
    "PatientAttributes",
    "PatientCreateRequest",
    "UploadAttributes",
    "UploadCreateRequest",
    "LabResultAttributes",
    "LabResultCreateRequest",
    "InventoryItemAttributes",
    "InventoryItemCreateRequest",
    "CheckoutLine",
    "CheckoutRequest",

    # Tenant schemas
    "SubscriptionChangeRequest",
    "TenantStatusRequest",
]
