"""Events published by the admission workflow after a status change commits."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from admissions.core.auth import Principal

from .models import ApplicationStatus


@dataclass(frozen=True)
class ApplicationStatusChanged:
    application_id: int
    previous_status: ApplicationStatus
    new_status: ApplicationStatus
    actor: Principal
    remarks: str | None = None
    record_history: bool = True
    notify: bool = True
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
