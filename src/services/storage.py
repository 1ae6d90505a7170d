"""Tenant storage accounting."""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import async_sessionmaker

from src.models.tenant import Tenant

logger = logging.getLogger(__name__)


async def track_storage(
    session_factory: async_sessionmaker,
    tenant_id: str,
    megabytes_used: float,
) -> None:
    """
    Add ``megabytes_used`` (negative to reclaim) to the tenant's counter.

    Runs on its own session as a single ``UPDATE ... SET storage_used =
    storage_used + :mb`` so concurrent calls never lose an increment.
    Storage accounting is advisory: every failure is logged and swallowed
    so the upload or deletion that triggered it is never affected.
    """
    try:
        async with session_factory() as session:
            result = await session.execute(
                update(Tenant)
                .where(Tenant.id == tenant_id)
                .values(storage_used=Tenant.storage_used + megabytes_used)
            )
            await session.commit()
            if result.rowcount == 0:
                logger.warning(f"Storage not tracked: tenant {tenant_id} not found")
            else:
                logger.debug(f"Tracked {megabytes_used} MB of storage for tenant {tenant_id}")
    except Exception as e:
        logger.error(f"Failed to track storage usage for tenant {tenant_id}: {e}")
