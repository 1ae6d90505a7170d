"""Authentication middleware and dependencies."""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from jose import JWTError, jwt
from passlib.context import CryptContext
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.settings import get_settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _unauthorized(code: str, message: str, path: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "errors": [{
                "status": "401",
                "code": code,
                "title": message,
                "detail": message,
                "source": {"pointer": path},
            }]
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle JWT authentication for all requests.

    The token carries the user id (``sub``), the tenant id and the roles;
    they are stored on ``request.state`` for the route dependencies.
    Can be disabled for development/testing.
    """

    EXEMPT_PATHS = {
        "/",
        "/health",
        "/version",
        "/openapi.json",
        "/docs",
        "/redoc",
        "/favicon.ico",
    }

    PUBLIC_ENDPOINTS = {
        ("POST", "/api/v1/auth/login"),
        ("POST", "/api/v1/auth/signup"),
        ("GET", "/api/v1/plans"),
    }

    def _is_public(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        if request.url.path in self.EXEMPT_PATHS:
            return True
        return (request.method, request.url.path.rstrip("/")) in self.PUBLIC_ENDPOINTS

    async def dispatch(self, request: Request, call_next):
        """Process request and validate authentication."""
        if self._is_public(request):
            return await call_next(request)

        settings = get_settings()

        # Skip authentication if disabled (development/testing)
        if settings.disable_auth:
            request.state.user_id = request.headers.get("X-User-ID", "dev-user-id")
            request.state.tenant_id = request.headers.get("X-Tenant-ID", settings.system_tenant_id)
            request.state.user_roles = ["Admin"]
            return await call_next(request)

        authorization = request.headers.get("Authorization")
        token = None
        if authorization:
            if not authorization.startswith("Bearer "):
                logger.warning(f"Invalid authorization format for {request.url.path}")
                return _unauthorized(
                    "INVALID_AUTHORIZATION_FORMAT",
                    "Authorization must be in 'Bearer <token>' format",
                    request.url.path,
                )
            token = authorization.split(" ", 1)[1]
        else:
            token = request.cookies.get("token")

        if not token:
            logger.warning(f"Missing credentials for {request.url.path}")
            return _unauthorized(
                "AUTHORIZATION_REQUIRED",
                "Authorization header is required",
                request.url.path,
            )

        try:
            payload = decode_access_token(token)
        except JWTError as e:
            logger.warning(f"JWT validation failed for {request.url.path}: {e}")
            return _unauthorized("INVALID_JWT_TOKEN", "Invalid or expired JWT token", request.url.path)

        user_id = payload.get("sub")
        tenant_id = payload.get("tenant_id")
        if not user_id or not tenant_id:
            return _unauthorized(
                "INVALID_TOKEN_PAYLOAD",
                "Token must contain 'sub' and 'tenant_id' claims",
                request.url.path,
            )

        request.state.user_id = user_id
        request.state.tenant_id = tenant_id
        request.state.user_roles = payload.get("roles", [])
        request.state.user_name = payload.get("name", "Staff")

        logger.debug(f"Authenticated user {user_id} of tenant {tenant_id} for {request.url.path}")

        return await call_next(request)


def create_access_token(
    user_id: str,
    tenant_id: str,
    roles: List[str],
    name: str = "Staff",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    )
    to_encode = {
        "sub": user_id,
        "tenant_id": tenant_id,
        "roles": roles,
        "name": name,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


def get_current_user_roles(request: Request) -> list:
    """Extract current user roles from request state."""
    if not hasattr(request.state, "user_roles"):
        raise HTTPException(
            status_code=500,
            detail={
                "error": "user_context_missing",
                "message": "User context not established",
                "code": "USER_CONTEXT_ERROR"
            }
        )
    return request.state.user_roles


def require_role(required_role: str):
    """Dependency to require specific user role."""
    def role_checker(request: Request) -> bool:
        user_roles = get_current_user_roles(request)
        if required_role not in user_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "insufficient_permissions",
                    "message": f"Role '{required_role}' is required",
                    "code": "INSUFFICIENT_PERMISSIONS"
                }
            )
        return True
    return role_checker
