"""
Student Applications Admin Router

API endpoints for administrators to decide and maintain applications.
All endpoints require a token with the admin role.

Endpoints:
- POST /admin/applications/{id}/decision - Approve or reject
- POST /admin/applications/{id}/deactivate - Deactivate
- GET /admin/applications/{id}/history - Decision history
- POST /admin/applications/backfill - Repair temporary passwords

Security:
- Rate limiting on action endpoints to prevent mass operations
- Temporary passwords are returned once, to the deciding admin, and never logged
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, get_current_admin_user
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.rate_limit import check_admin_rate_limit
from admissions.modules.applications import service
from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.applications.schemas import (
    BackfillResponse,
    DecisionRequest,
    DecisionResponse,
    HistoryEntryResponse,
    HistoryListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Rate Limiting Configuration
# ============================================

RATE_LIMIT_DECISION = (30, 60)  # 30 decisions per minute
RATE_LIMIT_DEACTIVATE = (30, 60)
RATE_LIMIT_BACKFILL = (5, 60)


def _handle_service_error(e: ServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


def _internal_error(e: Exception, action: str) -> HTTPException:
    logger.exception(f"Error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )


def _decision_message(status_value: ApplicationStatus, changed: bool) -> str:
    if not changed:
        return f"Application is already {status_value.value}; nothing changed."
    if status_value == ApplicationStatus.APPROVED:
        return "Application approved."
    if status_value == ApplicationStatus.REJECTED:
        return "Application rejected."
    return "Application deactivated."


@router.post(
    "/backfill",
    response_model=BackfillResponse,
    summary="Backfill Temporary Passwords",
    description="""
Issue fresh temporary passwords to approved students whose temporary password
is missing, blank, or identical to the stored permanent password. Safe to run
repeatedly.
""",
)
async def backfill_temporary_passwords(
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> BackfillResponse:
    await check_admin_rate_limit(admin, "backfill", *RATE_LIMIT_BACKFILL)

    try:
        repaired = await service.run_backfill(db, admin)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        raise _internal_error(e, "running backfill") from e

    return BackfillResponse(
        repaired=repaired,
        message=f"Backfilled temporary passwords for {repaired} approved students.",
    )


@router.post(
    "/{application_id}/decision",
    response_model=DecisionResponse,
    summary="Decide Application",
    description="""
Approve or reject an application.

**Approval** (first time) allocates the student's account identifier
(`YY-NNNN-CCC`) and issues a temporary password, returned in this response
only. **Rejection** stores the remarks on the application.

Deciding the status the application already has changes nothing.
""",
    responses={
        403: {"description": "Forbidden - not an admin"},
        404: {"description": "Application not found"},
        409: {"description": "Transition not allowed, or identifier conflict (retry)"},
        422: {"description": "Unknown status, not a decision, or missing remarks"},
        503: {"description": "Storage failure, nothing changed (retry)"},
    },
)
async def decide_application(
    application_id: int,
    data: DecisionRequest,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> DecisionResponse:
    await check_admin_rate_limit(admin, "decision", *RATE_LIMIT_DECISION)

    try:
        result = await service.decide_application(
            db, application_id, data.decision, admin, remarks=data.remarks
        )
    except ServiceError as e:
        logger.warning(f"Decision on application {application_id} failed: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        raise _internal_error(e, "deciding application") from e

    return DecisionResponse(
        application_id=result.application_id,
        previous_status=result.previous_status,
        status=result.status,
        account_identifier=result.account_identifier,
        temporary_password=result.temporary_password,
        changed=result.changed,
        message=_decision_message(result.status, result.changed),
    )


@router.post(
    "/{application_id}/deactivate",
    response_model=DecisionResponse,
    summary="Deactivate Application",
)
async def deactivate_application(
    application_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> DecisionResponse:
    await check_admin_rate_limit(admin, "deactivate", *RATE_LIMIT_DEACTIVATE)

    try:
        result = await service.deactivate_application(db, application_id, admin)
    except ServiceError as e:
        _handle_service_error(e)
    except Exception as e:
        raise _internal_error(e, "deactivating application") from e

    return DecisionResponse(
        application_id=result.application_id,
        previous_status=result.previous_status,
        status=result.status,
        account_identifier=result.account_identifier,
        changed=result.changed,
        message=_decision_message(result.status, result.changed),
    )


@router.get(
    "/{application_id}/history",
    response_model=HistoryListResponse,
    summary="Get Decision History",
)
async def get_history(
    application_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> HistoryListResponse:
    try:
        entries = await service.list_history(db, application_id, admin)
    except ServiceError as e:
        _handle_service_error(e)

    return HistoryListResponse(
        application_id=application_id,
        items=[HistoryEntryResponse.model_validate(entry) for entry in entries],
    )
