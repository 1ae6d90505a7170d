"""Health check and system endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import get_db_session
from src.core.settings import get_settings
from src.schemas.base import HealthCheckResponse
from src.services.audit import AuditLogger, get_audit_logger

router = APIRouter()

SERVICE_NAME = "vetnexus-quota-service"
SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    session: AsyncSession = Depends(get_db_session),
    audit_logger: AuditLogger = Depends(get_audit_logger),
):
    """
    Service health check endpoint.

    Checks database connectivity and reports the audit writer backlog.
    A failing audit writer only degrades the service; the database being
    unreachable makes it unhealthy.
    """
    settings = get_settings()
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "dependencies": {}
    }

    overall_status = "healthy"

    # Check database connectivity
    try:
        result = await session.execute(text("SELECT 1 as health_check"))
        row = result.fetchone()
        if not row or row[0] != 1:
            raise RuntimeError("Unexpected database response")
        health_data["dependencies"]["database"] = {
            "status": "healthy",
            "details": "Connection successful"
        }
    except Exception as e:
        health_data["dependencies"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
            "details": "Database connection failed"
        }
        overall_status = "unhealthy"

    # Audit trail writes are advisory
    audit_status = "degraded" if audit_logger.failures else "healthy"
    health_data["dependencies"]["audit_log"] = {
        "status": audit_status,
        "pending": audit_logger.pending,
        "failures": audit_logger.failures,
    }
    if audit_status == "degraded" and overall_status == "healthy":
        overall_status = "degraded"

    health_data["dependencies"]["payment_gateway"] = {
        "status": "healthy" if settings.flutterwave_secret_key else "degraded",
        "details": "Secret key configured" if settings.flutterwave_secret_key else "Secret key missing",
    }

    health_data["status"] = overall_status

    if overall_status == "unhealthy":
        raise HTTPException(status_code=503, detail={
            "code": "SERVICE_UNHEALTHY",
            "message": "Database connection failed",
        })

    return HealthCheckResponse(**health_data)


@router.get("/version")
async def version_info():
    """Get service version information."""
    settings = get_settings()
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "environment": settings.environment,
        "api_version": "v1",
    }
