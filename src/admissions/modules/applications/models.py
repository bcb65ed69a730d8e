"""
Student Application Models

The student admission record, its status workflow enum and the immutable
decision history.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from admissions.core.database import Base


class ApplicationStatus(str, enum.Enum):
    """Status of a student application."""

    REGISTERED = "REGISTERED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    INACTIVE = "INACTIVE"

    @property
    def label(self) -> str:
        """Humanized status name, e.g. ``Approved``."""
        return self.value.capitalize()


class StudentApplication(Base):
    """
    A student's admission record.

    ``account_identifier`` is assigned once, on the first transition into
    APPROVED, and never changes afterwards.
    """

    __tablename__ = "student_applications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    account_identifier: Mapped[str | None] = mapped_column(
        String(11), unique=True, nullable=True
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status"),
        nullable=False,
        default=ApplicationStatus.REGISTERED,
    )

    # Applicant profile
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    contact_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Guardian
    guardian_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    guardian_relationship: Mapped[str | None] = mapped_column(String(50), nullable=True)
    guardian_contact: Mapped[str | None] = mapped_column(String(20), nullable=True)
    guardian_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Program choice (reference into the external catalog)
    program_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    year_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    semester: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Set only on transition to REJECTED
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Credentials
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    temp_password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    temp_password_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Review tracking
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    history: Mapped[list["ApplicationHistoryEntry"]] = relationship(
        "ApplicationHistoryEntry",
        back_populates="application",
        order_by="ApplicationHistoryEntry.id",
        lazy="noload",
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (Index("ix_student_applications_status", "status"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return (
            f"<StudentApplication(id={self.id}, status={self.status}, "
            f"account_identifier={self.account_identifier})>"
        )


class ApplicationHistoryEntry(Base):
    """
    Immutable audit record of an approval or rejection decision.

    Rows are inserted once and never updated or deleted.
    """

    __tablename__ = "application_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("student_applications.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status"), nullable=False
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Snapshot of the acting administrator at decision time
    processed_by_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    processed_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    application: Mapped["StudentApplication"] = relationship(
        "StudentApplication", back_populates="history", lazy="noload"
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (Index("ix_application_history_application_id", "application_id"),)

    def __repr__(self) -> str:
        return f"<ApplicationHistoryEntry(application_id={self.application_id}, status={self.status})>"
