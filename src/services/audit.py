"""Audit trail of user actions, written in the background."""

import asyncio
import logging
from typing import Optional, Set

from sqlalchemy.ext.asyncio import async_sessionmaker

from src.core.database import get_database
from src.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditCategory:
    """Category tags used for audit entries."""

    FINANCIAL = "financial"
    CLINICAL = "clinical"
    ADMIN = "admin"
    SECURITY = "security"


class AuditLogger:
    """
    Fire-and-forget writer of :class:`AuditLog` entries.

    ``create_log`` returns immediately after scheduling the insert on its
    own session. Persistence failures are reported to the operational log
    and never reach the caller. Pending writes are tracked so they can be
    awaited with :meth:`drain` on shutdown.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory
        self._pending: Set[asyncio.Task] = set()
        self.failures = 0

    @property
    def session_factory(self) -> async_sessionmaker:
        if self._session_factory is None:
            self._session_factory = get_database().session_factory
        return self._session_factory

    @property
    def pending(self) -> int:
        return len(self._pending)

    def create_log(
        self,
        tenant_id: str,
        actor: str,
        action: str,
        category: str,
        details: str = "",
    ) -> None:
        """
        Submit one audit entry without waiting for it to be stored.

        ``actor`` is the id of the acting user.
        """
        entry = {
            "tenant_id": tenant_id,
            "user": actor,
            "action": action,
            "type": category,
            "details": details or "",
        }
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            logger.error(f"[LOG ERROR] Failed to log {action}: {e}")
            return
        task = loop.create_task(self._write(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, entry: dict) -> None:
        try:
            async with self.session_factory() as session:
                session.add(AuditLog(**entry))
                await session.commit()
        except Exception as e:
            self.failures += 1
            logger.error(f"[LOG ERROR] Failed to log {entry['action']}: {e}")

    async def drain(self) -> None:
        """Wait for every submitted entry to be written or to fail."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_audit_logger = AuditLogger()


def get_audit_logger() -> AuditLogger:
    """Get the process-wide audit logger."""
    return _audit_logger

