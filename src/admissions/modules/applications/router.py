"""
Student Applications Router

API endpoints for applicants.

Endpoints:
- POST /applications/register - Create an account and application (public)
- GET /applications/{id} - Get the application
- POST /applications/{id}/submit - Submit the application form for review
- GET /applications/{id}/history - Decision history
- POST /applications/{id}/password - Replace the temporary password

Security:
- Everything except registration requires a bearer token
- Students can only access their own application; admins can access any
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, get_current_principal
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.modules.applications import service
from admissions.modules.applications.schemas import (
    ApplicationForm,
    ApplicationRegister,
    ApplicationResponse,
    DecisionResponse,
    HistoryEntryResponse,
    HistoryListResponse,
    PasswordChangeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


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
    logger.exception(f"Unexpected error {action}: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


@router.post(
    "/register",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register Applicant",
    responses={
        409: {"description": "An application already exists for this email"},
    },
)
async def register_applicant(
    data: ApplicationRegister,
    db: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    """Create an account and an application in REGISTERED status."""
    try:
        application = await service.register_applicant(db, data)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        logger.warning(f"Registration failed: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        raise _internal_error(e, "registering applicant") from e


@router.get(
    "/{application_id}",
    response_model=ApplicationResponse,
    summary="Get Application",
)
async def get_application(
    application_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ApplicationResponse:
    try:
        application = await service.get_application(db, application_id, principal)
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        _handle_service_error(e)


@router.post(
    "/{application_id}/submit",
    response_model=DecisionResponse,
    summary="Submit Application For Review",
    description="""
Submit the completed application form. The application moves to `PENDING`
and is locked for editing until an administrator decides it.

Allowed from `REGISTERED`, and from `REJECTED` as a resubmission.
""",
    responses={
        403: {"description": "Not the owner of the application"},
        404: {"description": "Application not found"},
        409: {"description": "Application cannot be submitted in its current status"},
    },
)
async def submit_application(
    application_id: int,
    form: ApplicationForm | None = None,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> DecisionResponse:
    try:
        result = await service.submit_application(db, application_id, principal, form)
    except ServiceError as e:
        logger.warning(f"Submission of application {application_id} failed: {e.message}")
        _handle_service_error(e)
    except Exception as e:
        raise _internal_error(e, "submitting application") from e

    return DecisionResponse(
        application_id=result.application_id,
        previous_status=result.previous_status,
        status=result.status,
        account_identifier=result.account_identifier,
        changed=result.changed,
        message=(
            "Application submitted for review."
            if result.changed
            else "Application is already awaiting review."
        ),
    )


@router.get(
    "/{application_id}/history",
    response_model=HistoryListResponse,
    summary="Get Decision History",
)
async def get_history(
    application_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> HistoryListResponse:
    try:
        entries = await service.list_history(db, application_id, principal)
    except ServiceError as e:
        _handle_service_error(e)

    return HistoryListResponse(
        application_id=application_id,
        items=[HistoryEntryResponse.model_validate(entry) for entry in entries],
    )


@router.post(
    "/{application_id}/password",
    response_model=ApplicationResponse,
    summary="Change Password",
    description="Replace the temporary password issued on approval with a permanent one.",
)
async def change_password(
    application_id: int,
    data: PasswordChangeRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ApplicationResponse:
    try:
        application = await service.complete_password_change(
            db,
            application_id,
            principal,
            current_password=data.current_password,
            new_password=data.new_password,
        )
        return ApplicationResponse.model_validate(application)
    except ServiceError as e:
        _handle_service_error(e)
