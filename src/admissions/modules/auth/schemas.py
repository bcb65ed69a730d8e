"""Authentication schemas."""

from pydantic import BaseModel, Field

from admissions.modules.applications.models import ApplicationStatus


class LoginRequest(BaseModel):
    """Login request schema."""

    login: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Registration email or account identifier (YY-NNNN-CCC)",
    )
    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(BaseModel):
    """Login response schema."""

    access_token: str
    token_type: str = "bearer"
    application_id: int
    account_identifier: str | None
    status: ApplicationStatus
    must_change_password: bool = Field(
        ..., description="True while the issued temporary password is still active"
    )
