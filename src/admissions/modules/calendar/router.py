"""
Calendar Router

Endpoints:
- GET /calendar/events - List events by start date (any signed-in user)
- POST /calendar/events - Publish an event and notify active students (admin)
- DELETE /calendar/events/{id} - Delete an event (admin)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, get_current_admin_user, get_current_principal
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.core.rate_limit import check_admin_rate_limit
from admissions.modules.calendar import service
from admissions.modules.calendar.schemas import CalendarEventCreate, CalendarEventResponse

logger = logging.getLogger(__name__)

router = APIRouter()

RATE_LIMIT_PUBLISH = (10, 60)


def _handle_service_error(e: ServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


@router.get("/events", response_model=list[CalendarEventResponse], summary="List Calendar Events")
async def list_events(
    db: AsyncSession = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
) -> list[CalendarEventResponse]:
    events = await service.list_calendar_events(db)
    return [CalendarEventResponse.model_validate(event) for event in events]


@router.post(
    "/events",
    response_model=CalendarEventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish Calendar Event",
    description="""
Publish a calendar event. Every student whose application is not `INACTIVE`
receives an unread notification.

`end_date` defaults to `start_date` and must not precede it.
""",
)
async def publish_event(
    data: CalendarEventCreate,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> CalendarEventResponse:
    await check_admin_rate_limit(admin, "calendar_publish", *RATE_LIMIT_PUBLISH)

    try:
        event = await service.publish_calendar_event(db, data, admin)
    except ServiceError as e:
        _handle_service_error(e)
    return CalendarEventResponse.model_validate(event)


@router.delete(
    "/events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Calendar Event",
)
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(get_current_admin_user),
) -> None:
    try:
        await service.delete_calendar_event(db, event_id, admin)
    except ServiceError as e:
        _handle_service_error(e)
