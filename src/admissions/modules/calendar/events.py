"""Events published by the calendar module."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CalendarEventPublished:
    event_id: int
    title: str
    start_date: date | None
    end_date: date | None
    description: str | None = None
