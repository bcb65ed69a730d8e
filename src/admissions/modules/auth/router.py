"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import PrincipalRole
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.rate_limit import RateLimitExceeded, check_rate_limit
from admissions.core.security import create_access_token
from admissions.modules.applications import service as application_service
from admissions.modules.auth.schemas import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_LOGIN = (10, 60)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Student Login",
    responses={
        401: {"description": "Unknown login or wrong password"},
        403: {"description": "Account is inactive"},
        429: {"description": "Too many attempts"},
    },
)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """
    Authenticate a student and return an access token.

    Args:
        credentials: Email or account identifier, and password
        db: Database session

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: Account inactive
        HTTPException 429: Too many attempts for this login
    """
    limit, window = RATE_LIMIT_LOGIN
    if not await check_rate_limit(f"login:{credentials.login.strip().lower()}", limit, window):
        logger.warning("Login rate limit exceeded")
        raise RateLimitExceeded(limit, window)

    try:
        application = await application_service.authenticate_student(
            db, credentials.login, credentials.password
        )
    except ServiceError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e

    access_token = create_access_token(
        {
            "sub": str(application.id),
            "email": application.email,
            "role": PrincipalRole.STUDENT.value,
            "name": application.full_name,
        }
    )

    return LoginResponse(
        access_token=access_token,
        application_id=application.id,
        account_identifier=application.account_identifier,
        status=application.status,
        must_change_password=application.temp_password_active,
    )
