"""
Authentication and Authorization Module

Resolves the acting principal from a bearer token and provides the
precondition checks used by the service layer. Service functions receive the
principal explicitly; nothing reads identity from ambient request state.

SECURITY NOTE:
- Development test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable them
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from admissions.core.config import settings
from admissions.core.exceptions import PermissionDeniedError
from admissions.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


class PrincipalRole(str, Enum):
    """Roles an acting principal can hold."""

    ADMIN = "admin"
    STUDENT = "student"


@dataclass(frozen=True)
class Principal:
    """
    The identity performing an operation.

    For students, ``id`` is the application id as a string; for
    administrators it is the administrator account id.

    Attributes:
        id: Principal identifier (the token ``sub`` claim)
        email: Email address
        role: Role granted by the token
        name: Display name (optional)
    """

    id: str
    email: str
    role: PrincipalRole
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == PrincipalRole.ADMIN

    @property
    def display_name(self) -> str:
        """Name snapshot recorded in audit entries (falls back to email)."""
        if self.name and self.name.strip():
            return self.name
        return self.email

    def owns_application(self, application_id: int) -> bool:
        return self.role == PrincipalRole.STUDENT and self.id == str(application_id)

    def __str__(self) -> str:
        return f"Principal(id={self.id}, email={self.email}, role={self.role.value})"


def require_admin(principal: Principal) -> None:
    """Raise PermissionDeniedError unless the principal is an administrator."""
    if not principal.is_admin:
        logger.warning(f"Admin action denied for {principal}")
        raise PermissionDeniedError("Administrator access is required.")


def require_owner_or_admin(principal: Principal, application_id: int) -> None:
    """Raise PermissionDeniedError unless the principal owns the application or is an admin."""
    if principal.is_admin or principal.owns_application(application_id):
        return
    logger.warning(f"Access to application {application_id} denied for {principal}")
    raise PermissionDeniedError("You can only access your own application.")


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Both the settings and the raw environment variable must agree that this
    is not a production or staging deployment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()
    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )
    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )
    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_ADMIN = Principal(
    id="00000000-0000-0000-0000-000000000001",
    email="admin@admissions.dev",
    role=PrincipalRole.ADMIN,
    name="Development Admin",
)


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _validate_jwt_token(token: str) -> Principal:
    """
    Validate a bearer token and build the principal from its claims.

    Raises:
        HTTPException 401: If the token is invalid, expired or lacks claims
    """
    if _DEVELOPMENT_MODE and token in ("dev-token", "test-token"):
        logger.debug("Development mode: Using test token")
        return _DEV_ADMIN

    payload = decode_token(token)
    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        subject = payload.get("sub")
        if not subject:
            raise ValueError("Missing 'sub' claim in token")
        role = PrincipalRole(payload.get("role", ""))
        # Student subjects are application ids
        if role == PrincipalRole.STUDENT and not str(subject).isdigit():
            raise ValueError(f"Student token subject is not an application id: {subject!r}")
        return Principal(
            id=str(subject),
            email=payload.get("email", ""),
            role=role,
            name=payload.get("name"),
        )
    except ValueError as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """FastAPI dependency returning the authenticated principal (any role)."""
    return await _validate_jwt_token(credentials.credentials)


async def get_current_admin_user(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """
    FastAPI dependency restricting an endpoint to administrators.

    Raises:
        HTTPException 403: If the principal is not an administrator
    """
    if not principal.is_admin:
        logger.warning(f"Access denied: {principal} is not an administrator")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "ADMIN_ACCESS_REQUIRED",
                "message": "Administrator access is required for this endpoint.",
            },
        )
    return principal


async def get_current_student(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """FastAPI dependency restricting an endpoint to student accounts."""
    if principal.role != PrincipalRole.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "STUDENT_ACCESS_REQUIRED",
                "message": "This endpoint is available for student accounts only.",
            },
        )
    return principal


__all__ = [
    "Principal",
    "PrincipalRole",
    "get_current_admin_user",
    "get_current_principal",
    "get_current_student",
    "require_admin",
    "require_owner_or_admin",
]
