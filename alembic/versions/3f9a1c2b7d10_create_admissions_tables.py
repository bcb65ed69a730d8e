"""create admissions tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

This migration creates the initial schema:
1. student_applications with the unique account identifier
2. application_history, the append-only decision log
3. notifications, per-student inbox entries
4. calendar_events

The enum types are created once up front because application_status is
shared by student_applications and application_history.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2b7d10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

APPLICATION_STATUSES = ("REGISTERED", "PENDING", "APPROVED", "REJECTED", "INACTIVE")
NOTIFICATION_TYPES = ("APPLICATION_STATUS", "CALENDAR_EVENT")
CALENDAR_EVENT_TYPES = ("EXAM", "HOLIDAY", "EVENT", "SEMESTER_END")


def _enum(name: str, values: Sequence[str]) -> postgresql.ENUM:
    return postgresql.ENUM(*values, name=name, create_type=False)


def upgrade() -> None:
    """Create the admissions tables and their enum types."""
    application_status = _enum("application_status", APPLICATION_STATUSES)
    notification_type = _enum("notification_type", NOTIFICATION_TYPES)
    calendar_event_type = _enum("calendar_event_type", CALENDAR_EVENT_TYPES)

    bind = op.get_bind()
    for enum_type in (application_status, notification_type, calendar_event_type):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "student_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("account_identifier", sa.String(length=11), nullable=True),
        sa.Column("status", application_status, nullable=False),
        # Applicant profile
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("contact_number", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        # Guardian
        sa.Column("guardian_name", sa.String(length=200), nullable=True),
        sa.Column("guardian_relationship", sa.String(length=50), nullable=True),
        sa.Column("guardian_contact", sa.String(length=20), nullable=True),
        sa.Column("guardian_email", sa.String(length=255), nullable=True),
        # Program choice
        sa.Column("program_id", sa.Integer(), nullable=True),
        sa.Column("previous_school", sa.String(length=200), nullable=True),
        sa.Column("year_level", sa.String(length=20), nullable=True),
        sa.Column("semester", sa.String(length=20), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        # Credentials
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("temp_password", sa.String(length=64), nullable=True),
        sa.Column(
            "temp_password_active", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        # Review tracking
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "account_identifier", name="uq_student_applications_account_identifier"
        ),
        sa.UniqueConstraint("email", name="uq_student_applications_email"),
    )
    op.create_index(
        "ix_student_applications_status", "student_applications", ["status"], unique=False
    )

    op.create_table(
        "application_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("status", application_status, nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("processed_by_id", sa.String(length=64), nullable=True),
        sa.Column("processed_by_name", sa.String(length=255), nullable=True),
        sa.Column(
            "changed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["student_applications.id"],
            name="fk_application_history_application_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_application_history_application_id",
        "application_history",
        ["application_id"],
        unique=False,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("related_entity_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["application_id"],
            ["student_applications.id"],
            name="fk_notifications_application_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        "ix_notifications_application_id_created_at",
        "notifications",
        ["application_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "calendar_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("event_type", calendar_event_type, nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_calendar_events_start_date", "calendar_events", ["start_date"], unique=False
    )


def downgrade() -> None:
    """Drop the admissions tables and their enum types."""
    op.drop_index("ix_calendar_events_start_date", table_name="calendar_events")
    op.drop_table("calendar_events")

    op.drop_index("ix_notifications_application_id_created_at", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_application_history_application_id", table_name="application_history")
    op.drop_table("application_history")

    op.drop_index("ix_student_applications_status", table_name="student_applications")
    op.drop_table("student_applications")

    bind = op.get_bind()
    for name, values in (
        ("calendar_event_type", CALENDAR_EVENT_TYPES),
        ("notification_type", NOTIFICATION_TYPES),
        ("application_status", APPLICATION_STATUSES),
    ):
        _enum(name, values).drop(bind, checkfirst=True)
