"""
Student Applications Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from admissions.modules.applications.models import ApplicationStatus


class ApplicationRegister(BaseModel):
    """Request body for POST /applications/register."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    contact_number: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=500)
    program_id: int | None = Field(None, ge=1)


class ApplicationForm(BaseModel):
    """
    Request body for POST /applications/{id}/submit.

    Completes the profile; omitted fields keep their current value.
    """

    contact_number: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=500)
    guardian_name: str | None = Field(None, max_length=200)
    guardian_relationship: str | None = Field(None, max_length=50)
    guardian_contact: str | None = Field(None, max_length=20)
    guardian_email: EmailStr | None = None
    program_id: int | None = Field(None, ge=1)
    previous_school: str | None = Field(None, max_length=200)
    year_level: str | None = Field(None, max_length=20)
    semester: str | None = Field(None, max_length=20)


class ApplicationResponse(BaseModel):
    """Application as seen by its owner or an administrator."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_identifier: str | None
    status: ApplicationStatus
    first_name: str
    last_name: str
    email: str
    contact_number: str | None = None
    address: str | None = None
    guardian_name: str | None = None
    guardian_relationship: str | None = None
    guardian_contact: str | None = None
    guardian_email: str | None = None
    program_id: int | None = None
    previous_school: str | None = None
    year_level: str | None = None
    semester: str | None = None
    remarks: str | None = None
    temp_password_active: bool
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    created_at: datetime


class DecisionRequest(BaseModel):
    """Request body for POST /admin/applications/{id}/decision."""

    decision: str = Field(..., min_length=1, max_length=20, description="APPROVED or REJECTED")
    remarks: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def strip_remarks(self) -> "DecisionRequest":
        if self.remarks is not None:
            self.remarks = self.remarks.strip() or None
        return self


class DecisionResponse(BaseModel):
    """Response for a decision or deactivation."""

    application_id: int
    previous_status: ApplicationStatus
    status: ApplicationStatus
    account_identifier: str | None
    temporary_password: str | None = Field(
        None, description="Only present when credentials were issued by this decision"
    )
    changed: bool
    message: str


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: ApplicationStatus
    remarks: str | None
    processed_by_name: str | None
    changed_at: datetime


class HistoryListResponse(BaseModel):
    application_id: int
    items: list[HistoryEntryResponse]


class PasswordChangeRequest(BaseModel):
    """Request body for POST /applications/{id}/password."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)

    @model_validator(mode="after")
    def check_passwords_differ(self) -> "PasswordChangeRequest":
        if self.current_password == self.new_password:
            raise ValueError("New password must differ from the current password")
        return self


class BackfillResponse(BaseModel):
    repaired: int
    message: str
