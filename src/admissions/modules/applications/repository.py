"""
Student Applications Repository

Database operations for student applications and their decision history.

Design Principles:
- All queries are parameterized (no SQL injection)
- Only database operations, no business logic
- Writes that belong to a status transition only flush; the service owns
  the commit so the whole transition is a single transaction
"""

from sqlalchemy import exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import ApplicationHistoryEntry, ApplicationStatus, StudentApplication
from .schemas import ApplicationRegister


async def create(
    db: AsyncSession,
    data: ApplicationRegister,
    password_hash: str | None = None,
) -> StudentApplication:
    """Create a new application in REGISTERED status."""

    new_application = StudentApplication(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email.lower(),
        contact_number=data.contact_number,
        address=data.address,
        program_id=data.program_id,
        password_hash=password_hash,
        status=ApplicationStatus.REGISTERED,
        temp_password_active=False,
    )

    db.add(new_application)
    await db.commit()
    await db.refresh(new_application)

    return new_application


async def get_by_id(db: AsyncSession, id: int) -> StudentApplication | None:
    """Get application by ID."""
    return await db.get(StudentApplication, id)


async def get_by_email(db: AsyncSession, email: str) -> StudentApplication | None:
    """Get application by (case-insensitive) email."""
    result = await db.execute(
        select(StudentApplication).where(StudentApplication.email == email.lower())
    )
    return result.scalar_one_or_none()


async def get_by_account_identifier(
    db: AsyncSession, account_identifier: str
) -> StudentApplication | None:
    """Get application by its assigned account identifier."""
    result = await db.execute(
        select(StudentApplication).where(
            StudentApplication.account_identifier == account_identifier
        )
    )
    return result.scalar_one_or_none()


async def save(db: AsyncSession, application: StudentApplication) -> StudentApplication:
    """Stage changes to a single application (flush, no commit)."""
    db.add(application)
    await db.flush()
    return application


async def batch_save(db: AsyncSession, applications: list[StudentApplication]) -> None:
    """Stage changes to many applications (flush, no commit)."""
    db.add_all(applications)
    await db.flush()


# ============================================
# Account identifier queries
# ============================================


async def find_latest_identifier_with_prefix(db: AsyncSession, prefix: str) -> str | None:
    """
    Get the lexicographically greatest account identifier starting with ``prefix``.

    Identifiers are fixed-width and zero-padded, so lexicographic order equals
    sequence order within one year prefix.
    """
    result = await db.execute(
        select(func.max(StudentApplication.account_identifier)).where(
            StudentApplication.account_identifier.like(f"{prefix}%")
        )
    )
    return result.scalar_one_or_none()


async def exists_by_identifier(db: AsyncSession, identifier: str) -> bool:
    """Check whether an account identifier is already taken."""
    result = await db.execute(
        select(exists().where(StudentApplication.account_identifier == identifier))
    )
    return bool(result.scalar())


# ============================================
# Fan-out and backfill queries
# ============================================


async def list_active_application_ids(db: AsyncSession) -> list[int]:
    """Get the IDs of every application that is not INACTIVE."""
    result = await db.execute(
        select(StudentApplication.id)
        .where(StudentApplication.status != ApplicationStatus.INACTIVE)
        .order_by(StudentApplication.id)
    )
    return list(result.scalars().all())


async def find_needing_temporary_password(db: AsyncSession) -> list[StudentApplication]:
    """
    Get approved applications whose temporary credential is inconsistent.

    Matches applications that:
    1. Are APPROVED
    2. Still require a first-login password change (temp_password_active)
    3. Have a temporary password that is missing, blank, or identical to the
       stored permanent password value (never differentiated on import)

    A repaired record no longer matches, so the query is idempotent.
    """
    result = await db.execute(
        select(StudentApplication)
        .where(
            StudentApplication.status == ApplicationStatus.APPROVED,
            StudentApplication.temp_password_active.is_(True),
            or_(
                StudentApplication.temp_password.is_(None),
                func.trim(StudentApplication.temp_password) == "",
                StudentApplication.temp_password == StudentApplication.password_hash,
            ),
        )
        .order_by(StudentApplication.id)
    )
    return list(result.scalars().all())


# ============================================
# ApplicationHistoryEntry Repository
# ============================================


async def append_history_entry(
    db: AsyncSession,
    application_id: int,
    status: ApplicationStatus,
    remarks: str | None,
    processed_by_id: str | None,
    processed_by_name: str | None,
) -> ApplicationHistoryEntry:
    """Insert one history entry (flush, no commit). Entries are never updated."""
    entry = ApplicationHistoryEntry(
        application_id=application_id,
        status=status,
        remarks=remarks,
        processed_by_id=processed_by_id,
        processed_by_name=processed_by_name,
    )
    db.add(entry)
    await db.flush()
    return entry


async def list_history_for_application(
    db: AsyncSession, application_id: int
) -> list[ApplicationHistoryEntry]:
    """Get the decision history of an application, oldest first."""
    result = await db.execute(
        select(ApplicationHistoryEntry)
        .where(ApplicationHistoryEntry.application_id == application_id)
        .order_by(ApplicationHistoryEntry.changed_at, ApplicationHistoryEntry.id)
    )
    return list(result.scalars().all())
