"""
Notification Models

Per-student notifications created by the dispatcher. Only the recipient
changes them afterwards (read/unread toggle, delete).
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from admissions.core.database import Base


class NotificationType(str, enum.Enum):
    """What a notification is about."""

    APPLICATION_STATUS = "APPLICATION_STATUS"
    CALENDAR_EVENT = "CALENDAR_EVENT"


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Recipient
    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("student_applications.id", ondelete="CASCADE"), nullable=False
    )

    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # e.g. the calendar event that triggered the notification
    related_entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        Index("ix_notifications_application_id_created_at", "application_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, application_id={self.application_id}, type={self.type})>"
