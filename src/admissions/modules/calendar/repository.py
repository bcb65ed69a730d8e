"""
Calendar Repository
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import CalendarEvent
from .schemas import CalendarEventCreate


async def create(
    db: AsyncSession, data: CalendarEventCreate, created_by: str | None = None
) -> CalendarEvent:
    """Create a calendar event. A missing end date defaults to the start date."""
    event = CalendarEvent(
        title=data.title,
        start_date=data.start_date,
        end_date=data.end_date or data.start_date,
        event_type=data.event_type,
        description=data.description,
        created_by=created_by,
    )
    db.add(event)
    await db.commit()
    await db.refresh(event)
    return event


async def get_by_id(db: AsyncSession, id: int) -> CalendarEvent | None:
    return await db.get(CalendarEvent, id)


async def list_all(db: AsyncSession) -> list[CalendarEvent]:
    """Get all events ordered by start date."""
    result = await db.execute(
        select(CalendarEvent).order_by(CalendarEvent.start_date, CalendarEvent.id)
    )
    return list(result.scalars().all())


async def delete(db: AsyncSession, event: CalendarEvent) -> None:
    await db.delete(event)
    await db.commit()
