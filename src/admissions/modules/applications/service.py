"""
Student Applications Service

Business logic for the admission workflow: registration, sign-in, submission,
administrator decisions, deactivation, first-login password change and the
temporary-credential backfill.

Every operation takes the acting principal explicitly and checks it before
touching storage. A status change is committed as one transaction (status,
account identifier, credentials, normalized names, remarks); the decision
history and the student notification follow as ApplicationStatusChanged
handlers and never undo a committed change.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, require_admin, require_owner_or_admin
from admissions.core.config import settings
from admissions.core.events import dispatcher
from admissions.core.exceptions import PermissionDeniedError
from admissions.core.security import hash_password, verify_password

from . import identifiers, jobs, repository
from .credentials import generate_temporary_password
from .errors import (
    AccountInactiveError,
    ApplicationLockedError,
    ApplicationNotFoundError,
    DuplicateApplicationError,
    IdentifierAllocationError,
    IdentifierConflictError,
    InvalidCredentialsError,
    InvalidDecisionError,
    LoginFailedError,
    RemarksRequiredError,
    TransitionFailedError,
)
from .events import ApplicationStatusChanged
from .models import ApplicationHistoryEntry, ApplicationStatus, StudentApplication
from .schemas import ApplicationForm, ApplicationRegister
from .state_machine import DECISIONS, capitalize_first, parse_status, plan_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a status change request."""

    application_id: int
    previous_status: ApplicationStatus
    status: ApplicationStatus
    account_identifier: str | None
    temporary_password: str | None = None
    changed: bool = True


async def _get_application(db: AsyncSession, application_id: int) -> StudentApplication:
    application = await repository.get_by_id(db, application_id)
    if not application:
        logger.warning(f"Application not found: {application_id}")
        raise ApplicationNotFoundError(application_id)
    return application


def _password_matches(application: StudentApplication, password: str) -> bool:
    """Accept the active temporary password or the permanent one."""
    if (
        application.temp_password_active
        and application.temp_password
        and secrets.compare_digest(
            application.temp_password.encode("utf-8"), password.encode("utf-8")
        )
    ):
        return True
    return verify_password(password, application.password_hash)


# ============================================
# Applicant Service Functions
# ============================================


async def register_applicant(db: AsyncSession, data: ApplicationRegister) -> StudentApplication:
    """
    Create a new application in REGISTERED status.

    Raises:
        DuplicateApplicationError: If an application exists for the email
    """
    logger.info("Registering new applicant")

    if await repository.get_by_email(db, data.email):
        logger.warning("Registration rejected: email already registered")
        raise DuplicateApplicationError(data.email)

    try:
        application = await repository.create(db, data, password_hash=hash_password(data.password))
    except IntegrityError as e:
        await db.rollback()
        raise DuplicateApplicationError(data.email) from e

    logger.info(f"Registered application {application.id}")
    return application


async def get_application(
    db: AsyncSession, application_id: int, actor: Principal
) -> StudentApplication:
    """Get an application visible to the actor (its owner or an admin)."""
    require_owner_or_admin(actor, application_id)
    return await _get_application(db, application_id)


async def authenticate_student(db: AsyncSession, login: str, password: str) -> StudentApplication:
    """
    Resolve a student sign-in.

    ``login`` is the registration email or, once approved, the account
    identifier. The password may be the active temporary password or the
    permanent one.

    Raises:
        LoginFailedError: If no account matches the login and password
        AccountInactiveError: If the account is INACTIVE
    """
    login = login.strip()

    application = await repository.get_by_email(db, login)
    if application is None and identifiers.is_valid_identifier(login):
        application = await repository.get_by_account_identifier(db, login)

    if application is None:
        logger.warning("Login attempt for unknown account")
        raise LoginFailedError()

    if not _password_matches(application, password):
        logger.warning(f"Invalid password for application {application.id}")
        raise LoginFailedError()

    if application.status == ApplicationStatus.INACTIVE:
        logger.warning(f"Login attempt for inactive application {application.id}")
        raise AccountInactiveError()

    logger.info(f"Application {application.id} signed in")
    return application


async def submit_application(
    db: AsyncSession,
    application_id: int,
    actor: Principal,
    form: ApplicationForm | None = None,
) -> TransitionResult:
    """
    Submit the application form, moving it to PENDING.

    Allowed from REGISTERED and, as a resubmission, from REJECTED. Submitting
    an application that is already PENDING without changes is a no-op; with
    changes it is refused because the profile is locked while under review.

    Raises:
        PermissionDeniedError: If the actor is neither owner nor admin
        ApplicationNotFoundError: If the application doesn't exist
        ApplicationLockedError: If profile changes are sent while PENDING
        InvalidStatusTransitionError: From APPROVED or INACTIVE
    """
    require_owner_or_admin(actor, application_id)
    application = await _get_application(db, application_id)

    changes = form.model_dump(exclude_unset=True) if form else {}

    if application.status == ApplicationStatus.PENDING and changes:
        logger.warning(f"Profile change refused for application {application_id}: under review")
        raise ApplicationLockedError()

    return await _apply_transition(
        db, application, ApplicationStatus.PENDING, actor, profile_changes=changes
    )


async def complete_password_change(
    db: AsyncSession,
    application_id: int,
    actor: Principal,
    current_password: str,
    new_password: str,
) -> StudentApplication:
    """
    Replace the temporary credential with a permanent password.

    The current password may be either the issued temporary password or the
    permanent one. Clears the temporary credential on success.

    Raises:
        PermissionDeniedError: If the actor does not own the application
        InvalidCredentialsError: If the current password does not match
    """
    if not actor.owns_application(application_id):
        raise PermissionDeniedError("You can only change your own password.")

    application = await _get_application(db, application_id)

    if not _password_matches(application, current_password):
        logger.warning(f"Password change for application {application_id}: wrong current password")
        raise InvalidCredentialsError()

    application.password_hash = hash_password(new_password)
    application.temp_password = None
    application.temp_password_active = False

    await repository.save(db, application)
    await db.commit()

    logger.info(f"Application {application_id} completed password change")
    return application


async def list_history(
    db: AsyncSession, application_id: int, actor: Principal
) -> list[ApplicationHistoryEntry]:
    """Get the decision history of an application, oldest first."""
    require_owner_or_admin(actor, application_id)
    await _get_application(db, application_id)
    return await repository.list_history_for_application(db, application_id)


# ============================================
# Admin Service Functions
# ============================================


async def decide_application(
    db: AsyncSession,
    application_id: int,
    decision: str | ApplicationStatus,
    actor: Principal,
    remarks: str | None = None,
) -> TransitionResult:
    """
    Approve or reject an application.

    Approving for the first time allocates the account identifier and issues
    a temporary password; both are returned in the result. Deciding the
    status the application already has is a no-op.

    Args:
        db: Database session
        application_id: Application to decide
        decision: "APPROVED" or "REJECTED" (case-insensitive)
        actor: Acting administrator
        remarks: Optional notes, stored on rejection

    Raises:
        PermissionDeniedError: If the actor is not an administrator
        InvalidStatusLabelError: If the decision is not a known status
        InvalidDecisionError: If the decision is not APPROVED or REJECTED
        RemarksRequiredError: If rejection remarks are required but missing
        ApplicationNotFoundError: If the application doesn't exist
        InvalidStatusTransitionError: If the workflow forbids the change
        IdentifierConflictError: If a concurrent approval took the identifier
        IdentifierAllocationError: If no identifier could be allocated
        TransitionFailedError: If the change could not be stored
    """
    require_admin(actor)

    requested = parse_status(decision)
    if requested not in DECISIONS:
        raise InvalidDecisionError(requested.value)

    if (
        requested == ApplicationStatus.REJECTED
        and settings.require_rejection_remarks
        and not (remarks and remarks.strip())
    ):
        raise RemarksRequiredError()

    logger.info(f"Admin {actor.id} deciding {requested.value} for application {application_id}")

    application = await _get_application(db, application_id)
    return await _apply_transition(db, application, requested, actor, remarks=remarks)


async def deactivate_application(
    db: AsyncSession, application_id: int, actor: Principal
) -> TransitionResult:
    """
    Deactivate an application (graduation or removal).

    Keeps any assigned account identifier. Produces no history entry and no
    notification.
    """
    require_admin(actor)
    logger.info(f"Admin {actor.id} deactivating application {application_id}")

    application = await _get_application(db, application_id)
    return await _apply_transition(db, application, ApplicationStatus.INACTIVE, actor)


async def run_backfill(db: AsyncSession, actor: Principal) -> int:
    """Repair inconsistent temporary credentials. Returns the repaired count."""
    require_admin(actor)
    logger.info(f"Admin {actor.id} running temporary password backfill")
    return await jobs.backfill_temporary_passwords(db)


# ============================================
# Transition core
# ============================================


async def _apply_transition(
    db: AsyncSession,
    application: StudentApplication,
    requested: ApplicationStatus,
    actor: Principal,
    remarks: str | None = None,
    profile_changes: dict | None = None,
) -> TransitionResult:
    """
    Apply one status change as a single transaction and publish its event.

    The status, identifier, credentials, names, remarks and profile changes
    are committed together or not at all.
    """
    application_id = application.id
    previous = application.status
    rule = plan_transition(previous, requested)

    if rule is None:
        logger.info(
            f"Application {application_id} already {previous.value}, nothing to change"
        )
        return TransitionResult(
            application_id=application_id,
            previous_status=previous,
            status=previous,
            account_identifier=application.account_identifier,
            changed=False,
        )

    now = datetime.now(UTC)
    temporary_password = None
    first_approval = application.account_identifier is None

    try:
        if rule.allocates_identifier and first_approval:
            application.account_identifier = await identifiers.allocate_account_identifier(
                db,
                approval_date=now.date(),
                max_attempts=settings.identifier_max_attempts,
            )

        if rule.issues_credentials and first_approval:
            temporary_password = generate_temporary_password()
            application.temp_password = temporary_password
            application.temp_password_active = True
            if not application.password_hash:
                application.password_hash = hash_password(temporary_password)

        if rule.normalizes_names:
            application.first_name = capitalize_first(application.first_name)
            application.last_name = capitalize_first(application.last_name)

        if rule.stores_remarks:
            application.remarks = remarks

        for field_name, value in (profile_changes or {}).items():
            setattr(application, field_name, value)

        if requested == ApplicationStatus.PENDING:
            application.submitted_at = now
        if requested in DECISIONS:
            application.reviewed_at = now
            application.reviewed_by = actor.id

        application.status = requested

        await repository.save(db, application)
        await db.commit()
    except IdentifierAllocationError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Identifier conflict while updating application {application_id}: {e}")
        raise IdentifierConflictError() from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Failed to store {requested.value} for application {application_id}: {e}",
            exc_info=True,
        )
        raise TransitionFailedError(application_id) from e

    result = TransitionResult(
        application_id=application_id,
        previous_status=previous,
        status=requested,
        account_identifier=application.account_identifier,
        temporary_password=temporary_password,
    )

    logger.info(f"Application {application_id} moved {previous.value} -> {requested.value}")
    if rule.allocates_identifier and first_approval:
        logger.info(
            f"Assigned account identifier {result.account_identifier} to application {application_id}"
        )

    if rule.records_history or rule.notifies:
        await dispatcher.publish(
            db,
            ApplicationStatusChanged(
                application_id=application_id,
                previous_status=previous,
                new_status=requested,
                actor=actor,
                remarks=remarks,
                record_history=rule.records_history,
                notify=rule.notifies,
            ),
        )

    return result
