"""Inventory and point-of-sale models."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from .base import BaseModel, utcnow
from src.core.database import JSONType


class InventoryItem(BaseModel):
    """Stock-keeping unit sold at the clinic counter."""

    __tablename__ = "inventory_items"

    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False, default="General")
    sku = Column(String(100), comment="Stock keeping unit code")
    unit = Column(String(20), nullable=False, default="pcs")
    stock = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Units on hand; may go negative when sold short"
    )
    retail_price = Column(Float, nullable=False, default=0)
    purchase_price = Column(Float, nullable=False, default=0)
    supplier = Column(String(255))


class SaleRecord(BaseModel):
    """
    Completed checkout.

    ``items`` keeps the basket as sold (id, name, quantity, price) and
    ``payments`` the tenders taken, so the record stays readable after
    inventory prices change.
    """

    __tablename__ = "sales"

    owner_id = Column(
        String(36),
        ForeignKey("owners.id", ondelete="SET NULL"),
        index=True,
        comment="Paying client, if known"
    )
    subtotal = Column(Float, nullable=False, default=0)
    discount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="Completed")
    items = Column(JSONType, default=list)
    payments = Column(JSONType, default=list)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
