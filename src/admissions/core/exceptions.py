"""
Service Exceptions

Base error types raised by the service layer. Routers translate them into
HTTP responses; the service layer itself never imports FastAPI.
"""


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """A referenced record does not exist (or is not visible to the caller)."""

    def __init__(self, message: str, error_code: str = "NOT_FOUND"):
        super().__init__(message=message, error_code=error_code, status_code=404)


class ValidationError(ServiceError):
    """The request is malformed; nothing was changed."""

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(message=message, error_code=error_code, status_code=422)


class ConflictError(ServiceError):
    """The request conflicts with the current state of a record."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message=message, error_code=error_code, status_code=409)


class PermissionDeniedError(ServiceError):
    """The acting principal may not perform the operation."""

    def __init__(
        self,
        message: str = "You are not allowed to perform this action.",
        error_code: str = "PERMISSION_DENIED",
    ):
        super().__init__(message=message, error_code=error_code, status_code=403)


class AuthenticationError(ServiceError):
    """The supplied credentials do not identify an account."""

    def __init__(self, message: str, error_code: str = "AUTHENTICATION_FAILED"):
        super().__init__(message=message, error_code=error_code, status_code=401)


class TransientStorageError(ServiceError):
    """A storage failure rolled the operation back; the caller may retry."""

    def __init__(self, message: str, error_code: str = "STORAGE_UNAVAILABLE"):
        super().__init__(message=message, error_code=error_code, status_code=503)
