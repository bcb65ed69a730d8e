"""
Calendar Schemas
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from admissions.modules.calendar.models import CalendarEventType


class CalendarEventCreate(BaseModel):
    """Request body for POST /calendar/events."""

    title: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: date | None = Field(None, description="Defaults to start_date")
    event_type: CalendarEventType
    description: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def check_date_range(self) -> "CalendarEventCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class CalendarEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    start_date: date
    end_date: date
    event_type: CalendarEventType
    description: str | None
    created_at: datetime
