"""
Tests for calendar publication and its notification fan-out.
"""

from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from admissions.core.exceptions import PermissionDeniedError
from admissions.modules.applications.models import ApplicationStatus
from admissions.modules.calendar.events import CalendarEventPublished
from admissions.modules.calendar.models import CalendarEventType
from admissions.modules.calendar.schemas import CalendarEventCreate, CalendarEventResponse
from admissions.modules.calendar.service import (
    CalendarEventNotFoundError,
    delete_calendar_event,
    list_calendar_events,
    publish_calendar_event,
)
from admissions.modules.notifications import register_notification_handlers
from admissions.modules.notifications.models import Notification, NotificationType


def _event(**overrides) -> CalendarEventCreate:
    data = {
        "title": "Midterm Exams",
        "start_date": date(2025, 3, 10),
        "end_date": date(2025, 3, 14),
        "event_type": CalendarEventType.EXAM,
        "description": "Bring your ID",
    }
    data.update(overrides)
    return CalendarEventCreate(**data)


class TestCalendarEventCreate:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError, match="End date cannot be before start date"):
            _event(start_date=date(2025, 3, 14), end_date=date(2025, 3, 10))

    def test_end_date_is_optional(self):
        assert _event(end_date=None).end_date is None


class TestPublishCalendarEvent:
    @pytest.mark.asyncio
    async def test_fans_out_to_active_applications(
        self, db_session, make_application, admin_principal
    ):
        active = [
            await make_application(status=status)
            for status in (
                ApplicationStatus.REGISTERED,
                ApplicationStatus.PENDING,
                ApplicationStatus.APPROVED,
                ApplicationStatus.APPROVED,
                ApplicationStatus.REJECTED,
            )
        ]
        inactive = [await make_application(status=ApplicationStatus.INACTIVE) for _ in range(2)]

        event = await publish_calendar_event(db_session, _event(), admin_principal)

        notifications = (
            await db_session.execute(
                select(Notification).where(Notification.type == NotificationType.CALENDAR_EVENT)
            )
        ).scalars().all()
        assert sorted(n.application_id for n in notifications) == sorted(a.id for a in active)
        assert not {n.application_id for n in notifications} & {a.id for a in inactive}
        for notification in notifications:
            assert notification.title == "Midterm Exams"
            assert notification.message == (
                "Scheduled for Mar 10, 2025 - Mar 14, 2025. Bring your ID"
            )
            assert notification.related_entity_id == event.id
            assert notification.is_read is False

    @pytest.mark.asyncio
    async def test_missing_end_date_defaults_to_start(self, db_session, admin_principal):
        event = await publish_calendar_event(
            db_session, _event(end_date=None, description=None), admin_principal
        )

        assert event.end_date == event.start_date
        assert event.created_by == admin_principal.id

    @pytest.mark.asyncio
    async def test_no_recipients(self, db_session, admin_principal):
        event = await publish_calendar_event(db_session, _event(), admin_principal)

        assert event.id is not None
        notifications = (await db_session.execute(select(Notification))).scalars().all()
        assert notifications == []

    @pytest.mark.asyncio
    async def test_students_cannot_publish(self, db_session, student_for):
        with pytest.raises(PermissionDeniedError):
            await publish_calendar_event(db_session, _event(), student_for(1))


class TestHandlerFailure:
    @pytest.mark.asyncio
    async def test_failing_handler_leaves_event_usable(
        self, db_session, make_application, admin_principal, event_handlers
    ):
        student = await make_application(status=ApplicationStatus.APPROVED)

        async def store_down(db, published):
            db.add(
                Notification(
                    application_id=student.id,
                    type=NotificationType.CALENDAR_EVENT,
                    title="partial",
                    message="partial",
                )
            )
            await db.flush()
            raise RuntimeError("notification store down")

        event_handlers.clear()
        event_handlers.subscribe(CalendarEventPublished, store_down)
        register_notification_handlers()

        event = await publish_calendar_event(db_session, _event(), admin_principal)
        response = CalendarEventResponse.model_validate(event)

        assert response.id == event.id
        assert response.title == "Midterm Exams"
        assert response.end_date == date(2025, 3, 14)
        assert [e.id for e in await list_calendar_events(db_session)] == [event.id]

        notifications = (await db_session.execute(select(Notification))).scalars().all()
        assert [(n.application_id, n.title) for n in notifications] == [
            (student.id, "Midterm Exams")
        ]


class TestListAndDelete:
    @pytest.mark.asyncio
    async def test_list_orders_by_start_date(self, db_session, admin_principal):
        later = await publish_calendar_event(
            db_session,
            _event(title="Foundation Day", start_date=date(2025, 8, 1), end_date=None),
            admin_principal,
        )
        earlier = await publish_calendar_event(
            db_session,
            _event(
                title="Holy Week",
                start_date=date(2025, 4, 14),
                end_date=date(2025, 4, 18),
                event_type=CalendarEventType.HOLIDAY,
            ),
            admin_principal,
        )

        events = await list_calendar_events(db_session)

        assert [e.id for e in events] == [earlier.id, later.id]

    @pytest.mark.asyncio
    async def test_delete(self, db_session, admin_principal, student_for):
        event = await publish_calendar_event(db_session, _event(), admin_principal)

        with pytest.raises(PermissionDeniedError):
            await delete_calendar_event(db_session, event.id, student_for(1))

        await delete_calendar_event(db_session, event.id, admin_principal)

        assert await list_calendar_events(db_session) == []
        with pytest.raises(CalendarEventNotFoundError):
            await delete_calendar_event(db_session, event.id, admin_principal)
