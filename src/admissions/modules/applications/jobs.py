"""
Student Applications Background Jobs

Temporary-credential backfill: repairs approved students whose temporary
password is missing, blank, or was never differentiated from the permanent
password (records imported or migrated outside the approval workflow).

Design Principles:
- The job is idempotent; repaired records no longer match the scan
- All repairs are committed in one batch
- Temporary password values are never logged

Schedule:
- Runs once at startup (one-shot trigger) when enabled in settings
- Can be triggered manually via /debug/jobs or the admin backfill endpoint
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.date import DateTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.database import async_session_maker
from admissions.core.scheduler import register_job
from admissions.core.security import hash_password

from . import repository
from .credentials import generate_temporary_password

logger = logging.getLogger(__name__)

JOB_ID_BACKFILL_TEMPORARY_PASSWORDS = "applications_backfill_temporary_passwords"


async def backfill_temporary_passwords(db: AsyncSession) -> int:
    """
    Issue fresh temporary passwords to approved students with an
    inconsistent temporary credential.

    Students without a permanent password get it seeded from the new
    temporary password.

    Returns:
        Number of repaired applications
    """
    applications = await repository.find_needing_temporary_password(db)
    if not applications:
        logger.info("Temporary password backfill: nothing to repair")
        return 0

    for application in applications:
        temporary_password = generate_temporary_password()
        application.temp_password = temporary_password
        application.temp_password_active = True
        if not application.password_hash:
            application.password_hash = hash_password(temporary_password)

    await repository.batch_save(db, applications)
    await db.commit()

    logger.info(f"Backfilled temporary passwords for {len(applications)} approved students")
    return len(applications)


async def run_backfill_job() -> dict[str, Any]:
    """
    Scheduled entry point: run the backfill in its own session.

    Returns:
        Dict with executed_at and repaired count
    """
    executed_at = datetime.now(UTC)
    logger.info("Starting temporary password backfill job")

    async with async_session_maker() as db:
        repaired = await backfill_temporary_passwords(db)

    return {"executed_at": executed_at.isoformat(), "repaired": repaired}


def register_application_jobs(run_on_startup: bool = True) -> None:
    """
    Register application background jobs with the scheduler.

    Call during startup, before the scheduler starts. When ``run_on_startup``
    is False the backfill is registered for manual triggering only.
    """
    register_job(
        job_id=JOB_ID_BACKFILL_TEMPORARY_PASSWORDS,
        func=run_backfill_job,
        trigger=DateTrigger() if run_on_startup else None,
    )
    logger.info(
        f"Registered job: {JOB_ID_BACKFILL_TEMPORARY_PASSWORDS} "
        f"({'once at startup' if run_on_startup else 'manual only'})"
    )
