"""Subscription plan catalog, limits parsing and idempotent seeding."""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.base import utcnow
from src.models.plan import Plan

logger = logging.getLogger(__name__)

# Sentinel for "no ceiling" on maxUsers, maxClients and aiLimit
UNLIMITED = -1

# Storage ceiling assumed when a plan carries no (or a zero) maxStorageGB
DEFAULT_STORAGE_GB = 1


DEFAULT_PLANS: List[Dict[str, Any]] = [
    {
        "id": "Trial",
        "name": "Trial",
        "price_monthly": 100,
        "price_yearly": 1000,
        "features": ["Full Access for Testing", "Limited Time", "Single User"],
        "limits": {
            "maxUsers": 1,
            "maxClients": 10,
            "maxStorageGB": 0.5,
            "modules": {"pos": True, "lab": True, "ai": True, "reports": True, "multiBranch": False},
        },
    },
    {
        "id": "Starter",
        "name": "Starter",
        "price_monthly": 7000,
        "price_yearly": 70000,
        "features": [
            "2 Users Max",
            "Max 50 Clients",
            "Basic Inventory & Sales",
            "No Printing/Downloads",
            "No AI Features",
        ],
        "limits": {
            "maxUsers": 2,
            "maxClients": 50,
            "maxStorageGB": 2,
            "modules": {
                "pos": True, "lab": False, "ai": False, "reports": False,
                "multiBranch": False, "print": False,
            },
        },
    },
    {
        "id": "Standard",
        "name": "Standard",
        "price_monthly": 30000,
        "price_yearly": 300000,
        "features": [
            "7 Users Max",
            "Unlimited Clients",
            "Full Reports & Printing",
            "Limited AI (200/mo)",
            "Lab Module",
        ],
        "limits": {
            "maxUsers": 7,
            "maxClients": UNLIMITED,
            "maxStorageGB": 10,
            "modules": {
                "pos": True, "lab": True, "ai": True, "reports": True,
                "multiBranch": False, "print": True, "aiLimit": 200,
            },
        },
    },
    {
        "id": "Premium",
        "name": "Premium",
        "price_monthly": 70000,
        "price_yearly": 700000,
        "features": [
            "Unlimited Users",
            "Unlimited AI",
            "Multi-Branch Management",
            "Staff Transfer",
            "Priority Support",
        ],
        "limits": {
            "maxUsers": UNLIMITED,
            "maxClients": UNLIMITED,
            "maxStorageGB": 100,
            "modules": {
                "pos": True, "lab": True, "ai": True, "reports": True,
                "multiBranch": True, "print": True, "aiLimit": UNLIMITED,
            },
        },
    },
]


class PlanModules(BaseModel):
    """Feature modules switched on by a plan."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    pos: bool = False
    lab: bool = False
    ai: bool = False
    reports: bool = False
    multi_branch: bool = Field(False, alias="multiBranch")
    print_enabled: Optional[bool] = Field(None, alias="print")
    ai_limit: Optional[int] = Field(None, alias="aiLimit")


class PlanLimits(BaseModel):
    """Typed view over the ``limits`` document stored on a plan."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    max_users: int = Field(UNLIMITED, alias="maxUsers")
    max_clients: int = Field(UNLIMITED, alias="maxClients")
    max_storage_gb: Optional[float] = Field(None, alias="maxStorageGB")
    modules: PlanModules = Field(default_factory=PlanModules)

    @classmethod
    def from_plan(cls, plan: Plan) -> "PlanLimits":
        return cls.model_validate(plan.limits or {})

    @property
    def max_storage_mb(self) -> float:
        """Storage ceiling in megabytes."""
        return (self.max_storage_gb or DEFAULT_STORAGE_GB) * 1024

    @property
    def storage_gb_display(self) -> float:
        return self.max_storage_gb or DEFAULT_STORAGE_GB

    def module_enabled(self, module: str) -> bool:
        """Whether a feature module (``pos``, ``lab``, ``multiBranch``...) is on."""
        data = self.modules.model_dump(by_alias=True)
        value = data.get(module)
        if isinstance(value, bool):
            return value
        # Numeric flags such as aiLimit: anything but zero enables the module
        return bool(value)

    def enabled_modules(self) -> List[str]:
        data = self.modules.model_dump(by_alias=True)
        return sorted(name for name, value in data.items() if isinstance(value, bool) and value)


_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def build_plan_upsert(entry: Dict[str, Any], dialect_name: str):
    """``INSERT ... ON CONFLICT (id) DO UPDATE`` for one catalog entry."""
    try:
        insert = _DIALECT_INSERTS[dialect_name]
    except KeyError:
        raise ValueError(f"Plan seeding does not support the {dialect_name} dialect")

    statement = insert(Plan).values(**entry)
    return statement.on_conflict_do_update(
        index_elements=[Plan.id],
        set_={
            **{key: statement.excluded[key] for key in entry if key != "id"},
            "updated_at": utcnow(),
        },
    )


async def seed_plans(
    session: AsyncSession,
    catalog: Iterable[Dict[str, Any]] = DEFAULT_PLANS,
) -> List[Plan]:
    """
    Upsert every catalog entry by id and commit.

    Rows are written with a single conflict-aware insert each, so several
    workers booting against an empty database converge on the same rows
    instead of failing on the primary key. Existing plans get every field
    overwritten with the catalog values.
    """
    dialect_name = session.get_bind().dialect.name
    plan_ids = []
    for entry in catalog:
        entry = copy.deepcopy(entry)
        await session.execute(build_plan_upsert(entry, dialect_name))
        plan_ids.append(entry["id"])
        logger.debug(f"Upserted plan {entry['id']}")

    await session.commit()

    result = await session.execute(
        select(Plan)
        .where(Plan.id.in_(plan_ids))
        .execution_options(populate_existing=True)
    )
    by_id = {plan.id: plan for plan in result.scalars().all()}
    logger.info(f"Seeded {len(plan_ids)} subscription plans")
    return [by_id[plan_id] for plan_id in plan_ids]
