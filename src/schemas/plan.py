"""Subscription plan schemas."""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseSchema, JSONAPICollectionResponse, JSONAPIResponse


class PlanUpdateAttributes(BaseSchema):
    """Mutable plan fields; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price_monthly: Optional[float] = Field(None, ge=0)
    price_yearly: Optional[float] = Field(None, ge=0)
    features: Optional[List[str]] = None
    limits: Optional[Dict[str, Any]] = Field(
        None, description="maxUsers, maxClients, maxStorageGB and modules"
    )


class PlanUpdateResource(BaseSchema):
    type: str = Field("plan", description="Resource type")
    attributes: PlanUpdateAttributes


class PlanUpdateRequest(BaseSchema):
    data: PlanUpdateResource


class PlanResponse(JSONAPIResponse):
    pass


class PlanCollectionResponse(JSONAPICollectionResponse):
    pass
