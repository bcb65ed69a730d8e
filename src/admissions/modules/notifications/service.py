"""
Notifications Service

Two parts:

- Dispatcher handlers: turn ApplicationStatusChanged and
  CalendarEventPublished events into unread notifications. Calendar events
  fan out to every application that is not INACTIVE.
- Recipient operations: list, count unread, mark read/unread and delete.
  Only the owning student may change a notification; a notification of
  another recipient is reported as not found.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, require_owner_or_admin
from admissions.core.events import dispatcher
from admissions.core.exceptions import NotFoundError, PermissionDeniedError
from admissions.modules.applications import repository as application_repository
from admissions.modules.applications.errors import ApplicationNotFoundError
from admissions.modules.applications.events import ApplicationStatusChanged
from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.calendar.events import CalendarEventPublished

from . import repository
from .models import Notification, NotificationType

logger = logging.getLogger(__name__)

NO_DATE_MESSAGE = "New calendar event added."


class NotificationNotFoundError(NotFoundError):
    def __init__(self, notification_id: int):
        super().__init__(
            message=f"Notification {notification_id} not found",
            error_code="NOTIFICATION_NOT_FOUND",
        )


# ============================================
# Message formatting
# ============================================


def format_date(value: date) -> str:
    """Format as ``Mar 3, 2025``."""
    return f"{value:%b} {value.day}, {value.year}"


def build_status_title(status: ApplicationStatus) -> str:
    return f"Application {status.label}"


def build_status_message(status: ApplicationStatus, remarks: str | None = None) -> str:
    message = f"Your application status is now {status.value.replace('_', ' ').lower()}"
    if remarks and remarks.strip():
        message += f". Notes: {remarks.strip()}"
    return message


def build_calendar_message(
    start_date: date | None,
    end_date: date | None,
    description: str | None,
) -> str:
    if start_date is None:
        return description if description else NO_DATE_MESSAGE

    date_range = format_date(start_date)
    if end_date is not None and end_date != start_date:
        date_range = f"{date_range} - {format_date(end_date)}"

    message = f"Scheduled for {date_range}"
    if description and description.strip():
        message += f". {description.strip()}"
    return message


# ============================================
# Dispatcher
# ============================================


async def notify_status_change(
    db: AsyncSession,
    application_id: int,
    new_status: ApplicationStatus,
    remarks: str | None = None,
) -> Notification:
    """Create one unread status notification for the application."""
    notification = Notification(
        application_id=application_id,
        type=NotificationType.APPLICATION_STATUS,
        title=build_status_title(new_status),
        message=build_status_message(new_status, remarks),
        is_read=False,
    )
    await repository.append_notification(db, notification)
    logger.info(f"Queued {new_status.value} notification for application {application_id}")
    return notification


async def notify_calendar_event(db: AsyncSession, event: CalendarEventPublished) -> int:
    """
    Create one unread notification per application that is not INACTIVE.

    Returns:
        Number of notifications created
    """
    recipients = await application_repository.list_active_application_ids(db)
    if not recipients:
        logger.info(f"Calendar event {event.event_id}: no active applications to notify")
        return 0

    message = build_calendar_message(event.start_date, event.end_date, event.description)
    notifications = [
        Notification(
            application_id=application_id,
            type=NotificationType.CALENDAR_EVENT,
            title=event.title,
            message=message,
            is_read=False,
            related_entity_id=event.event_id,
        )
        for application_id in recipients
    ]
    await repository.append_notifications(db, notifications)

    logger.info(f"Calendar event {event.event_id} fanned out to {len(notifications)} applications")
    return len(notifications)


async def handle_status_changed(db: AsyncSession, event: ApplicationStatusChanged) -> None:
    if not event.notify:
        return
    await notify_status_change(db, event.application_id, event.new_status, event.remarks)


async def handle_calendar_event_published(db: AsyncSession, event: CalendarEventPublished) -> None:
    await notify_calendar_event(db, event)


def register_notification_handlers() -> None:
    """Subscribe the dispatcher handlers to their events."""
    dispatcher.subscribe(ApplicationStatusChanged, handle_status_changed)
    dispatcher.subscribe(CalendarEventPublished, handle_calendar_event_published)


# ============================================
# Recipient operations
# ============================================


async def _ensure_application_exists(db: AsyncSession, application_id: int) -> None:
    if not await application_repository.get_by_id(db, application_id):
        raise ApplicationNotFoundError(application_id)


def _require_recipient(actor: Principal, application_id: int) -> None:
    if not actor.owns_application(application_id):
        raise PermissionDeniedError("Notifications can only be changed by their recipient.")


async def list_notifications(
    db: AsyncSession, application_id: int, actor: Principal
) -> list[Notification]:
    """Get an application's notifications, newest first."""
    require_owner_or_admin(actor, application_id)
    await _ensure_application_exists(db, application_id)
    return await repository.list_for_application(db, application_id)


async def count_unread(db: AsyncSession, application_id: int, actor: Principal) -> int:
    require_owner_or_admin(actor, application_id)
    return await repository.count_unread_for_application(db, application_id)


async def _set_read(
    db: AsyncSession,
    application_id: int,
    notification_id: int,
    actor: Principal,
    is_read: bool,
) -> Notification:
    _require_recipient(actor, application_id)

    notification = await repository.get_for_application(db, notification_id, application_id)
    if not notification:
        logger.debug(f"Notification {notification_id} not found for application {application_id}")
        raise NotificationNotFoundError(notification_id)

    if notification.is_read != is_read:
        notification.is_read = is_read
        await db.commit()
    return notification


async def mark_as_read(
    db: AsyncSession, application_id: int, notification_id: int, actor: Principal
) -> Notification:
    return await _set_read(db, application_id, notification_id, actor, is_read=True)


async def mark_as_unread(
    db: AsyncSession, application_id: int, notification_id: int, actor: Principal
) -> Notification:
    return await _set_read(db, application_id, notification_id, actor, is_read=False)


async def delete_notification(
    db: AsyncSession, application_id: int, notification_id: int, actor: Principal
) -> None:
    _require_recipient(actor, application_id)

    if not await repository.delete(db, notification_id, application_id):
        raise NotificationNotFoundError(notification_id)
    logger.info(f"Application {application_id} deleted notification {notification_id}")
