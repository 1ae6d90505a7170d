"""API tests for plan-gated modules: lab results, point of sale, client portal."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from src.middleware.auth import verify_password
from src.models.audit_log import AuditLog
from src.models.inventory import InventoryItem, SaleRecord
from src.models.owner import Owner
from src.models.pet import Pet
from src.models.plan import Plan
from src.models.tenant import TenantStatus


@pytest.fixture
def add_pet(session_factory, add_owners):
    """Factory adding a patient with its owner to a tenant."""
    async def _add(tenant_id: str) -> Pet:
        owner = (await add_owners(tenant_id, 1))[0]
        async with session_factory() as session:
            pet = Pet(tenant_id=tenant_id, owner_id=owner.id, name="Rex", species="Dog")
            session.add(pet)
            await session.commit()
            return pet
    return _add


@pytest.fixture
def add_stock(session_factory):
    async def _add(tenant_id: str, name: str = "Dewormer", stock: int = 10) -> InventoryItem:
        async with session_factory() as session:
            item = InventoryItem(tenant_id=tenant_id, name=name, stock=stock, retail_price=1500)
            session.add(item)
            await session.commit()
            return item
    return _add


async def _stock(session_factory, item_id):
    async with session_factory() as session:
        return (await session.get(InventoryItem, item_id)).stock


def _lab_payload(pet_id, **attributes):
    return {
        "data": {
            "type": "lab_result",
            "attributes": {"pet_id": pet_id, "type": "Hematology", "test_name": "CBC", **attributes},
        }
    }


def _checkout_payload(lines, total, **attributes):
    return {"data": {"type": "sale", "attributes": {"items": lines, "total": total, **attributes}}}


@pytest.mark.asyncio
async def test_lab_results_require_lab_module(client: AsyncClient, make_tenant, add_pet, auth_headers):
    starter = await make_tenant(plan="Starter")
    pet = await add_pet(starter.id)

    response = await client.post("/api/v1/labs", json=_lab_payload(pet.id), headers=auth_headers(starter.id))

    assert response.status_code == 403
    error = response.json()["errors"][0]
    assert error["code"] == "FEATURE_NOT_AVAILABLE"
    assert error["meta"] == {"module": "lab", "plan": "Starter"}

    response = await client.get("/api/v1/labs", headers=auth_headers(starter.id))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_lab_result_on_standard_plan(client: AsyncClient, make_tenant, add_pet, auth_headers, audit_logger, session_factory):
    standard = await make_tenant(plan="Standard")
    pet = await add_pet(standard.id)

    response = await client.post("/api/v1/labs", json=_lab_payload(pet.id), headers=auth_headers(standard.id))

    assert response.status_code == 201
    attributes = response.json()["data"]["attributes"]
    assert attributes["pet_id"] == pet.id
    assert attributes["type"] == "Hematology"
    assert attributes["status"] == "Pending"

    response = await client.get("/api/v1/labs", params={"pet_id": pet.id}, headers=auth_headers(standard.id))
    assert response.status_code == 200
    assert len(response.json()["data"]) == 1

    await audit_logger.drain()
    async with session_factory() as session:
        log = (await session.execute(select(AuditLog))).scalar_one()
    assert log.action == "Recorded Lab Result"
    assert log.type == "clinical"
    assert log.user == "user-1"


@pytest.mark.asyncio
async def test_lab_result_for_another_clinics_patient(client: AsyncClient, make_tenant, add_pet, auth_headers):
    standard = await make_tenant(plan="Standard")
    other = await make_tenant(plan="Standard", name="Other Clinic")
    pet = await add_pet(other.id)

    response = await client.post("/api/v1/labs", json=_lab_payload(pet.id), headers=auth_headers(standard.id))

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "PATIENT_NOT_FOUND"


@pytest.mark.asyncio
async def test_lab_result_rejects_unknown_status(client: AsyncClient, make_tenant, add_pet, auth_headers):
    standard = await make_tenant(plan="Standard")
    pet = await add_pet(standard.id)

    response = await client.post(
        "/api/v1/labs", json=_lab_payload(pet.id, status="Lost"), headers=auth_headers(standard.id)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_checkout_records_sale_and_decrements_stock(client: AsyncClient, make_tenant, add_owners, add_stock, auth_headers, audit_logger, session_factory):
    starter = await make_tenant(plan="Starter")
    owner = (await add_owners(starter.id, 1))[0]
    item = await add_stock(starter.id, stock=10)
    lines = [
        {"id": item.id, "name": "Dewormer", "quantity": 3, "price": 1500},
        {"name": "Consultation", "price": 5000},
    ]

    response = await client.post(
        "/api/v1/sales/checkout",
        json=_checkout_payload(lines, 9000, discount=500, owner_id=owner.id, payment_method="Card"),
        headers=auth_headers(starter.id),
    )

    assert response.status_code == 201
    attributes = response.json()["data"]["attributes"]
    assert attributes["status"] == "Completed"
    assert attributes["subtotal"] == 9500
    assert attributes["total"] == 9000
    assert attributes["owner_id"] == owner.id
    assert attributes["payments"][0]["method"] == "Card"
    assert await _stock(session_factory, item.id) == 7

    await audit_logger.drain()
    async with session_factory() as session:
        log = (await session.execute(select(AuditLog))).scalar_one()
    assert log.action == "New Sale"
    assert log.type == "financial"
    assert log.details == "Total: 9000"
    assert log.user == "user-1"


@pytest.mark.asyncio
async def test_checkout_leaves_other_clinics_stock_alone(client: AsyncClient, make_tenant, add_stock, auth_headers, session_factory):
    starter = await make_tenant(plan="Starter")
    other = await make_tenant(plan="Starter", name="Other Clinic")
    foreign_item = await add_stock(other.id, stock=5)

    response = await client.post(
        "/api/v1/sales/checkout",
        json=_checkout_payload([{"id": foreign_item.id, "name": "Dewormer", "quantity": 2, "price": 10}], 20),
        headers=auth_headers(starter.id),
    )

    assert response.status_code == 201
    assert await _stock(session_factory, foreign_item.id) == 5


@pytest.mark.asyncio
async def test_checkout_requires_pos_module(client: AsyncClient, make_tenant, auth_headers, session_factory):
    async with session_factory() as session:
        session.add(Plan(
            id="LabOnly",
            name="Lab Only",
            price_monthly=0,
            price_yearly=0,
            features=[],
            limits={"maxUsers": 1, "maxClients": 10, "maxStorageGB": 1, "modules": {"lab": True, "pos": False}},
        ))
        await session.commit()
    tenant = await make_tenant(plan="LabOnly")

    response = await client.post(
        "/api/v1/sales/checkout",
        json=_checkout_payload([{"name": "Consultation", "price": 5000}], 5000),
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "FEATURE_NOT_AVAILABLE"
    async with session_factory() as session:
        assert (await session.execute(select(SaleRecord))).scalars().all() == []


@pytest.mark.asyncio
async def test_checkout_blocked_for_restricted_tenant(client: AsyncClient, make_tenant, auth_headers):
    tenant = await make_tenant(plan="Premium", status=TenantStatus.RESTRICTED)

    response = await client.post(
        "/api/v1/sales/checkout",
        json=_checkout_payload([{"name": "Consultation", "price": 5000}], 5000),
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "ACCOUNT_RESTRICTED"


@pytest.mark.asyncio
async def test_inventory_listing(client: AsyncClient, make_tenant, auth_headers):
    starter = await make_tenant(plan="Starter")
    payload = {"data": {"type": "inventory_item", "attributes": {"name": "Flea Collar", "stock": 4, "retail_price": 2500}}}

    response = await client.post("/api/v1/inventory", json=payload, headers=auth_headers(starter.id))
    assert response.status_code == 201
    assert response.json()["data"]["attributes"]["unit"] == "pcs"

    response = await client.get("/api/v1/inventory", headers=auth_headers(starter.id))
    assert response.status_code == 200
    assert [item["attributes"]["name"] for item in response.json()["data"]] == ["Flea Collar"]


@pytest.mark.asyncio
async def test_enable_client_portal_with_password(client: AsyncClient, make_tenant, add_owners, auth_headers, audit_logger, session_factory):
    tenant = await make_tenant(plan="Starter")
    owner = (await add_owners(tenant.id, 1))[0]

    response = await client.patch(
        f"/api/v1/owners/{owner.id}/portal",
        json={"is_active": True, "password": "portal-password"},
        headers=auth_headers(tenant.id),
    )

    assert response.status_code == 200
    attributes = response.json()["data"]["attributes"]
    assert attributes["is_portal_active"] is True
    assert "password_hash" not in attributes

    async with session_factory() as session:
        stored = await session.get(Owner, owner.id)
    assert stored.is_portal_active is True
    assert verify_password("portal-password", stored.password_hash)

    await audit_logger.drain()
    async with session_factory() as session:
        log = (await session.execute(select(AuditLog))).scalar_one()
    assert log.action == "Enabled Client Portal"
    assert log.type == "security"


@pytest.mark.asyncio
async def test_disable_client_portal_keeps_password(client: AsyncClient, make_tenant, add_owners, auth_headers, session_factory):
    tenant = await make_tenant(plan="Starter")
    owner = (await add_owners(tenant.id, 1))[0]
    async with session_factory() as session:
        stored = await session.get(Owner, owner.id)
        stored.is_portal_active = True
        stored.password_hash = "existing-hash"
        await session.commit()

    response = await client.patch(
        f"/api/v1/owners/{owner.id}/portal", json={"is_active": False}, headers=auth_headers(tenant.id)
    )

    assert response.status_code == 200
    async with session_factory() as session:
        stored = await session.get(Owner, owner.id)
    assert stored.is_portal_active is False
    assert stored.password_hash == "existing-hash"


@pytest.mark.asyncio
async def test_client_portal_of_another_clinic(client: AsyncClient, make_tenant, add_owners, auth_headers):
    tenant = await make_tenant(plan="Starter")
    other = await make_tenant(plan="Starter", name="Other Clinic")
    owner = (await add_owners(other.id, 1))[0]

    response = await client.patch(
        f"/api/v1/owners/{owner.id}/portal", json={"is_active": True}, headers=auth_headers(tenant.id)
    )

    assert response.status_code == 404
