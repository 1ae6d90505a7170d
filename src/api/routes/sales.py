"""Point-of-sale endpoints: inventory, sales history and checkout."""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_pagination_params,
    require_module,
)
from src.api.routes.owners import get_tenant_owner
from src.core.database import get_db_session
from src.models.base import utcnow
from src.models.inventory import InventoryItem, SaleRecord
from src.models.tenant import Tenant
from src.schemas.base import JSONAPICollectionResponse, JSONAPIResponse, to_resource
from src.schemas.sale import CheckoutRequest, InventoryItemCreateRequest
from src.services.audit import AuditCategory, AuditLogger, get_audit_logger

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/inventory", response_model=JSONAPICollectionResponse)
async def list_inventory(
    tenant: Tenant = Depends(require_module("pos")),
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    result = await session.execute(
        select(InventoryItem)
        .where(InventoryItem.tenant_id == tenant_id)
        .order_by(InventoryItem.name)
        .offset(pagination["offset"])
        .limit(pagination["limit"])
    )
    items = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("inventory_item", item) for item in items],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("/inventory", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    request: InventoryItemCreateRequest,
    tenant: Tenant = Depends(require_module("pos")),
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    item = InventoryItem(tenant_id=tenant_id, **request.data.attributes.model_dump())
    session.add(item)
    await session.commit()

    audit_logger.create_log(
        tenant_id, actor, "Added Stock Item", AuditCategory.FINANCIAL,
        f"Item: {item.name} ({item.stock} {item.unit})",
    )
    return JSONAPIResponse(data=to_resource("inventory_item", item))


@router.get("/sales", response_model=JSONAPICollectionResponse)
async def list_sales(
    tenant: Tenant = Depends(require_module("pos")),
    tenant_id: str = Depends(get_current_tenant_id),
    pagination: dict = Depends(get_pagination_params),
    session: AsyncSession = Depends(get_db_session),
):
    result = await session.execute(
        select(SaleRecord)
        .where(SaleRecord.tenant_id == tenant_id)
        .order_by(SaleRecord.date.desc())
        .offset(pagination["offset"])
        .limit(pagination["limit"])
    )
    sales = result.scalars().all()
    return JSONAPICollectionResponse(
        data=[to_resource("sale", sale) for sale in sales],
        meta={"page": pagination["page"], "per_page": pagination["per_page"]},
    )


@router.post("/sales/checkout", response_model=JSONAPIResponse, status_code=status.HTTP_201_CREATED)
async def checkout(
    request: CheckoutRequest,
    tenant: Tenant = Depends(require_module("pos")),
    tenant_id: str = Depends(get_current_tenant_id),
    actor: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Record a sale and take its stock lines off the shelf.

    The sale and every stock decrement commit together. Lines pointing at
    items of another clinic are recorded on the sale but leave that
    clinic's stock untouched.
    """
    attributes = request.data.attributes
    if attributes.owner_id:
        await get_tenant_owner(session, tenant_id, attributes.owner_id)

    now = utcnow()
    sale = SaleRecord(
        tenant_id=tenant_id,
        owner_id=attributes.owner_id,
        subtotal=sum(line.price * line.quantity for line in attributes.items),
        discount=attributes.discount,
        total=attributes.total,
        status="Completed",
        items=[line.model_dump() for line in attributes.items],
        payments=[{
            "method": attributes.payment_method,
            "amount": attributes.total,
            "date": now.isoformat(),
        }],
        date=now,
    )
    session.add(sale)

    for line in attributes.items:
        if line.id:
            await session.execute(
                update(InventoryItem)
                .where(InventoryItem.id == line.id, InventoryItem.tenant_id == tenant_id)
                .values(stock=InventoryItem.stock - line.quantity)
            )
    await session.commit()

    logger.info(f"Sale {sale.id} of {len(attributes.items)} lines for tenant {tenant_id}")
    audit_logger.create_log(
        tenant_id, actor, "New Sale", AuditCategory.FINANCIAL, f"Total: {attributes.total:g}"
    )
    return JSONAPIResponse(data=to_resource("sale", sale))
