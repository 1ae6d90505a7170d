"""Inventory and checkout schemas."""

from typing import List, Optional

from pydantic import Field

from .base import BaseSchema


class InventoryItemAttributes(BaseSchema):
    """Attributes for adding a stock item."""

    name: str = Field(min_length=1, max_length=255)
    category: str = Field("General", min_length=1, max_length=100)
    sku: Optional[str] = Field(None, max_length=100)
    unit: str = Field("pcs", min_length=1, max_length=20)
    stock: int = Field(0, ge=0)
    retail_price: float = Field(0, ge=0)
    purchase_price: float = Field(0, ge=0)
    supplier: Optional[str] = Field(None, max_length=255)


class InventoryItemResource(BaseSchema):
    type: str = Field("inventory_item", description="Resource type")
    attributes: InventoryItemAttributes


class InventoryItemCreateRequest(BaseSchema):
    data: InventoryItemResource


class CheckoutLine(BaseSchema):
    """One basket line; lines without an ``id`` are services, not stock."""

    id: Optional[str] = Field(None, description="Inventory item id")
    name: str = Field(min_length=1, max_length=255)
    quantity: int = Field(1, ge=1)
    price: float = Field(0, ge=0, description="Unit price charged")


class CheckoutAttributes(BaseSchema):
    """A completed point-of-sale basket."""

    items: List[CheckoutLine] = Field(min_length=1)
    total: float = Field(ge=0, description="Amount charged after discount")
    discount: float = Field(0, ge=0)
    payment_method: str = Field("Cash", min_length=1, max_length=50)
    owner_id: Optional[str] = Field(None, description="Paying client")


class CheckoutResource(BaseSchema):
    type: str = Field("sale", description="Resource type")
    attributes: CheckoutAttributes


class CheckoutRequest(BaseSchema):
    data: CheckoutResource
