"""
Calendar Models

Academic calendar entries. Publishing one notifies every active student.
"""

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from admissions.core.database import Base


class CalendarEventType(str, enum.Enum):
    EXAM = "EXAM"
    HOLIDAY = "HOLIDAY"
    EVENT = "EVENT"
    SEMESTER_END = "SEMESTER_END"


class CalendarEvent(Base):
    """An academic calendar entry spanning one or more days."""

    __tablename__ = "calendar_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Equal to start_date for single-day events
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_type: Mapped[CalendarEventType] = mapped_column(
        Enum(CalendarEventType, name="calendar_event_type"), nullable=False
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (Index("ix_calendar_events_start_date", "start_date"),)

    def __repr__(self) -> str:
        return f"<CalendarEvent(id={self.id}, title={self.title!r}, start_date={self.start_date})>"
