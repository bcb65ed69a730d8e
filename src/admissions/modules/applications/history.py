"""
Decision History Recorder

Appends an immutable audit entry for each approval or rejection. Runs as a
handler of ApplicationStatusChanged after the status change has committed.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal
from admissions.core.events import dispatcher

from . import repository
from .events import ApplicationStatusChanged
from .models import ApplicationHistoryEntry, ApplicationStatus
from .state_machine import AUDITED_STATUSES

logger = logging.getLogger(__name__)


async def record_transition(
    db: AsyncSession,
    application_id: int,
    previous_status: ApplicationStatus,
    new_status: ApplicationStatus,
    remarks: str | None,
    actor: Principal,
) -> ApplicationHistoryEntry | None:
    """
    Append a history entry if the transition is an actual decision.

    Returns:
        The new entry, or None when nothing qualifies for the audit trail
    """
    if new_status not in AUDITED_STATUSES or new_status == previous_status:
        return None

    entry = await repository.append_history_entry(
        db,
        application_id=application_id,
        status=new_status,
        remarks=remarks,
        processed_by_id=actor.id,
        processed_by_name=actor.display_name,
    )
    logger.info(
        f"Recorded {new_status.value} decision for application {application_id} "
        f"by {actor.display_name}"
    )
    return entry


async def handle_status_changed(db: AsyncSession, event: ApplicationStatusChanged) -> None:
    if not event.record_history:
        return
    await record_transition(
        db,
        application_id=event.application_id,
        previous_status=event.previous_status,
        new_status=event.new_status,
        remarks=event.remarks,
        actor=event.actor,
    )


def register_history_handlers() -> None:
    """Subscribe the recorder to application status changes."""
    dispatcher.subscribe(ApplicationStatusChanged, handle_status_changed)
