"""
Notifications Repository

Database operations for student notifications. Inserts only flush; the
caller (an event handler or the service) owns the commit.
"""

from sqlalchemy import delete as sql_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification


async def append_notification(db: AsyncSession, notification: Notification) -> Notification:
    """Insert one notification (flush, no commit)."""
    db.add(notification)
    await db.flush()
    return notification


async def append_notifications(db: AsyncSession, notifications: list[Notification]) -> None:
    """Insert a batch of notifications (flush, no commit)."""
    db.add_all(notifications)
    await db.flush()


async def list_for_application(db: AsyncSession, application_id: int) -> list[Notification]:
    """Get an application's notifications, newest first."""
    result = await db.execute(
        select(Notification)
        .where(Notification.application_id == application_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(result.scalars().all())


async def count_unread_for_application(db: AsyncSession, application_id: int) -> int:
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.application_id == application_id,
            Notification.is_read.is_(False),
        )
    )
    return int(result.scalar_one())


async def get_for_application(
    db: AsyncSession, notification_id: int, application_id: int
) -> Notification | None:
    """Get a notification only if it belongs to the given application."""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.application_id == application_id,
        )
    )
    return result.scalar_one_or_none()


async def delete(db: AsyncSession, notification_id: int, application_id: int) -> bool:
    """Delete a recipient's notification. Returns False if nothing matched."""
    result = await db.execute(
        sql_delete(Notification).where(
            Notification.id == notification_id,
            Notification.application_id == application_id,
        )
    )
    await db.commit()
    return result.rowcount > 0
