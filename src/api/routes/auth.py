"""Authentication API endpoints: clinic signup, staff login, session info."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies.common import (
    get_current_tenant_id,
    get_current_user_id,
    get_tenant_service,
)
from src.core.database import get_db_session
from src.core.settings import get_settings
from src.middleware.auth import create_access_token
from src.models.user import User
from src.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from src.schemas.base import to_resource
from src.services.tenant_service import (
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    PaymentVerificationError,
    PlanNotFoundError,
    TenantService,
    UserSuspendedError,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _session_response(response: Response, user: User, tenant) -> TokenResponse:
    settings = get_settings()
    token = create_access_token(user.id, tenant.id, list(user.roles or []), name=user.name)
    response.set_cookie(
        "token",
        token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.jwt_access_token_expire_minutes * 60,
    )
    return TokenResponse(
        data=to_resource("user", user),
        meta={
            "access_token": token,
            "token_type": "bearer",
            "expires_in": settings.jwt_access_token_expire_minutes * 60,
            "tenant": tenant.to_dict(),
        },
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    response: Response,
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """
    Register a clinic with its administrator.

    The payment reference is verified before anything is created; trial
    signups send ``TRIAL``.
    """
    try:
        tenant, user = await tenant_service.signup(request.data.attributes.model_dump())
    except PlanNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "INVALID_PLAN", "message": str(e)},
        )
    except PaymentVerificationError as e:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail={"code": "PAYMENT_VERIFICATION_FAILED", "message": str(e)},
        )
    except EmailAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": "EMAIL_ALREADY_EXISTS", "message": str(e)},
        )

    return _session_response(response, user, tenant)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    response: Response,
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Authenticate a staff member and issue an access token."""
    try:
        user, tenant = await tenant_service.authenticate(request.email, request.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "INVALID_CREDENTIALS", "message": "Invalid credentials"},
        )
    except UserSuspendedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "USER_SUSPENDED", "message": "Account suspended"},
        )

    return _session_response(response, user, tenant)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    response.delete_cookie("token")


@router.get("/me", response_model=TokenResponse)
async def me(
    user_id: str = Depends(get_current_user_id),
    tenant_id: str = Depends(get_current_tenant_id),
    session: AsyncSession = Depends(get_db_session),
    tenant_service: TenantService = Depends(get_tenant_service),
):
    """Current user with their tenant."""
    user = await session.get(User, user_id)
    if user is None or user.tenant_id != tenant_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "USER_NOT_FOUND", "message": "User not found"},
        )
    tenant = await tenant_service.get_tenant(tenant_id)
    return TokenResponse(data=to_resource("user", user), meta={"tenant": tenant.to_dict()})
