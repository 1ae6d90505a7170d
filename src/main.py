"""Main FastAPI application for the VetNexus clinic service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import (
    auth,
    health,
    labs,
    logs,
    owners,
    patients,
    plans,
    reports,
    sales,
    tenant,
    uploads,
    users,
)
from src.core.database import get_database
from src.core.settings import get_settings
from src.middleware.auth import AuthenticationMiddleware
from src.middleware.logging import LoggingMiddleware, configure_logging
from src.services import quota_service, tenant_service
from src.services.audit import get_audit_logger
from src.services.bootstrap import bootstrap

# Initialize logging
configure_logging()

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    database = get_database()
    await database.connect()
    async with database.get_session() as session:
        await bootstrap(session, settings)
    yield
    # Shutdown
    await get_audit_logger().drain()
    await database.disconnect()


app = FastAPI(
    title="VetNexus Clinic Service",
    description="Multi-tenant veterinary clinic backend with subscription plans and quotas",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
)

# Middleware stack, innermost first (order matters!)
app.add_middleware(AuthenticationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Security middleware
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts
)

# Outermost so that rejected requests are logged too
app.add_middleware(LoggingMiddleware)


def _error_response(request: Request, status_code: int, code: str, title: str, detail: str, meta=None):
    error = {
        "status": str(status_code),
        "code": code,
        "title": title,
        "detail": detail,
        "source": {"pointer": request.url.path},
    }
    if meta is not None:
        error["meta"] = meta
    return JSONResponse(status_code=status_code, content={"errors": [error]})


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with JSON:API format."""
    detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "errors": [{
                "status": str(exc.status_code),
                "code": detail.get("code", "HTTP_ERROR") if isinstance(detail, dict) else "HTTP_ERROR",
                "title": detail.get("message", "HTTP Error") if isinstance(detail, dict) else str(detail),
                "detail": detail.get("message", str(detail)) if isinstance(detail, dict) else str(detail),
                "source": {"pointer": request.url.path}
            }]
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(quota_service.TenantNotFoundError)
@app.exception_handler(tenant_service.TenantNotFoundError)
async def tenant_not_found_handler(request: Request, exc: Exception):
    return _error_response(request, 404, "TENANT_NOT_FOUND", "Tenant Not Found", str(exc))


@app.exception_handler(quota_service.AccountRestrictedError)
async def account_restricted_handler(request: Request, exc: quota_service.AccountRestrictedError):
    return _error_response(
        request, 403, "ACCOUNT_RESTRICTED", "Account Restricted", str(exc),
        meta={"status": exc.status},
    )


@app.exception_handler(quota_service.QuotaExceededError)
async def quota_exceeded_handler(request: Request, exc: quota_service.QuotaExceededError):
    return _error_response(
        request, 403, "QUOTA_EXCEEDED", "Quota Exceeded", str(exc),
        meta={"resource": exc.resource_type, "limit": exc.limit},
    )


@app.exception_handler(quota_service.FeatureNotAvailableError)
async def feature_not_available_handler(request: Request, exc: quota_service.FeatureNotAvailableError):
    return _error_response(
        request, 403, "FEATURE_NOT_AVAILABLE", "Feature Not Available", str(exc),
        meta={"module": exc.module, "plan": exc.plan_id},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    """Handle unexpected errors with JSON:API format."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "errors": [{
                "status": "500",
                "code": "INTERNAL_SERVER_ERROR",
                "title": "Internal Server Error",
                "detail": "An unexpected error occurred"
            }]
        }
    )


# Routes
app.include_router(health.router, prefix="", tags=["system"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": health.SERVICE_NAME,
        "version": health.SERVICE_VERSION,
        "status": "running",
        "api": {
            "docs": "/docs" if not settings.is_production else None,
            "openapi": "/openapi.json" if not settings.is_production else None
        }
    }


# Main API routes
api_prefix = settings.api_v1_prefix
app.include_router(auth.router, prefix=f"{api_prefix}/auth", tags=["auth"])
app.include_router(plans.router, prefix=f"{api_prefix}/plans", tags=["plans"])
app.include_router(users.router, prefix=f"{api_prefix}/users", tags=["users"])
app.include_router(owners.router, prefix=f"{api_prefix}/owners", tags=["owners"])
app.include_router(patients.router, prefix=f"{api_prefix}/patients", tags=["patients"])
app.include_router(uploads.router, prefix=f"{api_prefix}/uploads", tags=["uploads"])
app.include_router(logs.router, prefix=f"{api_prefix}/logs", tags=["logs"])
app.include_router(tenant.router, prefix=f"{api_prefix}/tenant", tags=["tenant"])
app.include_router(tenant.admin_router, prefix=f"{api_prefix}/admin", tags=["admin"])
app.include_router(reports.router, prefix=f"{api_prefix}/reports", tags=["reports"])
app.include_router(labs.router, prefix=f"{api_prefix}/labs", tags=["labs"])
app.include_router(sales.router, prefix=api_prefix, tags=["sales"])


if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
