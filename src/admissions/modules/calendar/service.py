"""
Calendar Service

Publishing an event stores it and emits CalendarEventPublished, which the
notifications module fans out to every active student.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, require_admin
from admissions.core.events import dispatcher
from admissions.core.exceptions import NotFoundError

from . import repository
from .events import CalendarEventPublished
from .models import CalendarEvent
from .schemas import CalendarEventCreate

logger = logging.getLogger(__name__)


class CalendarEventNotFoundError(NotFoundError):
    def __init__(self, event_id: int):
        super().__init__(
            message=f"Calendar event {event_id} not found",
            error_code="CALENDAR_EVENT_NOT_FOUND",
        )


async def publish_calendar_event(
    db: AsyncSession, data: CalendarEventCreate, actor: Principal
) -> CalendarEvent:
    """
    Store a calendar event and notify active students.

    Notification delivery is best-effort and does not affect the stored event.
    """
    require_admin(actor)

    event = await repository.create(db, data, created_by=actor.id)
    logger.info(f"Admin {actor.id} published calendar event {event.id}: {event.title}")

    await dispatcher.publish(
        db,
        CalendarEventPublished(
            event_id=event.id,
            title=event.title,
            start_date=event.start_date,
            end_date=event.end_date,
            description=event.description,
        ),
    )
    return event


async def list_calendar_events(db: AsyncSession) -> list[CalendarEvent]:
    return await repository.list_all(db)


async def delete_calendar_event(db: AsyncSession, event_id: int, actor: Principal) -> None:
    require_admin(actor)

    event = await repository.get_by_id(db, event_id)
    if not event:
        raise CalendarEventNotFoundError(event_id)

    await repository.delete(db, event)
    logger.info(f"Admin {actor.id} deleted calendar event {event_id}")
