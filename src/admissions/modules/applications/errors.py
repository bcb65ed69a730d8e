"""
Student Application Errors

Raised by the admission workflow. All derive from the shared service error
categories so routers can translate them uniformly.
"""

from admissions.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    TransientStorageError,
    ValidationError,
)


class ApplicationNotFoundError(NotFoundError):
    """Raised when an application is not found."""

    def __init__(self, application_id: int | None = None):
        message = (
            f"Application {application_id} not found" if application_id else "Application not found"
        )
        super().__init__(message=message, error_code="APPLICATION_NOT_FOUND")


class DuplicateApplicationError(ConflictError):
    """Raised when an application already exists for the email address."""

    def __init__(self, email: str):
        super().__init__(
            message=f"An application already exists for {email}",
            error_code="DUPLICATE_APPLICATION",
        )


class InvalidStatusLabelError(ValidationError):
    """Raised when a status label is not one of the known statuses."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(
            message=f"Unknown application status: {label!r}",
            error_code="INVALID_STATUS",
        )


class InvalidDecisionError(ValidationError):
    """Raised when a decision is neither APPROVED nor REJECTED."""

    def __init__(self, decision: str):
        super().__init__(
            message=f"Decision must be APPROVED or REJECTED, got {decision}",
            error_code="INVALID_DECISION",
        )


class RemarksRequiredError(ValidationError):
    """Raised when a rejection is submitted without remarks and remarks are required."""

    def __init__(self):
        super().__init__(
            message="Remarks are required when rejecting an application.",
            error_code="REMARKS_REQUIRED",
        )


class InvalidStatusTransitionError(ConflictError):
    """Raised when the workflow does not allow moving between two statuses."""

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            message=f"Cannot change application status from {current_status} to {requested_status}.",
            error_code="INVALID_STATUS_TRANSITION",
        )


class ApplicationLockedError(ConflictError):
    """Raised when the profile is edited while the application is under review."""

    def __init__(self):
        super().__init__(
            message="The application is under review and cannot be edited.",
            error_code="APPLICATION_LOCKED",
        )


class InvalidCredentialsError(ValidationError):
    """Raised when the current password does not match."""

    def __init__(self):
        super().__init__(
            message="The current password is incorrect.",
            error_code="INVALID_CREDENTIALS",
        )


class IdentifierAllocationError(ConflictError):
    """Raised when no account identifier could be allocated."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            message=f"Could not allocate an account identifier: {reason}",
            error_code="IDENTIFIER_ALLOCATION_FAILED",
        )


class IdentifierConflictError(ConflictError):
    """Raised when a concurrent approval committed the same identifier first."""

    def __init__(self):
        super().__init__(
            message="Another approval claimed the same account identifier. Please retry.",
            error_code="IDENTIFIER_CONFLICT",
        )


class TransitionFailedError(TransientStorageError):
    """Raised when the status change could not be stored; nothing was changed."""

    def __init__(self, application_id: int):
        super().__init__(
            message=f"Status change for application {application_id} could not be saved. Please retry.",
            error_code="TRANSITION_FAILED",
        )


class LoginFailedError(AuthenticationError):
    """Raised when a login or password does not match any student account."""

    def __init__(self):
        super().__init__(
            message="Invalid login or password.",
            error_code="INVALID_CREDENTIALS",
        )


class AccountInactiveError(PermissionDeniedError):
    """Raised when an INACTIVE student tries to sign in."""

    def __init__(self):
        super().__init__(
            message="This student account is no longer active.",
            error_code="ACCOUNT_INACTIVE",
        )
