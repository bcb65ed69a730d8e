"""
Notifications Router

Endpoints for the signed-in student's own notifications.

Endpoints:
- GET /notifications - List notifications, newest first
- GET /notifications/unread-count - Number of unread notifications
- POST /notifications/{id}/read - Mark as read
- POST /notifications/{id}/unread - Mark as unread
- DELETE /notifications/{id} - Delete
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from admissions.core.auth import Principal, get_current_student
from admissions.core.database import get_db
from admissions.core.exceptions import ServiceError
from admissions.modules.notifications import service
from admissions.modules.notifications.schemas import (
    NotificationActionResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_service_error(e: ServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "error": e.error_code,
            "message": e.message,
        },
    ) from e


@router.get("", response_model=NotificationListResponse, summary="List My Notifications")
async def list_my_notifications(
    db: AsyncSession = Depends(get_db),
    student: Principal = Depends(get_current_student),
) -> NotificationListResponse:
    application_id = int(student.id)
    try:
        notifications = await service.list_notifications(db, application_id, student)
        unread = await service.count_unread(db, application_id, student)
    except ServiceError as e:
        _handle_service_error(e)

    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in notifications],
        unread=unread,
    )


@router.get("/unread-count", response_model=UnreadCountResponse, summary="Unread Count")
async def unread_count(
    db: AsyncSession = Depends(get_db),
    student: Principal = Depends(get_current_student),
) -> UnreadCountResponse:
    try:
        count = await service.count_unread(db, int(student.id), student)
    except ServiceError as e:
        _handle_service_error(e)
    return UnreadCountResponse(count=count)


@router.post("/{notification_id}/read", response_model=NotificationActionResponse)
async def mark_as_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    student: Principal = Depends(get_current_student),
) -> NotificationActionResponse:
    try:
        await service.mark_as_read(db, int(student.id), notification_id, student)
    except ServiceError as e:
        _handle_service_error(e)
    return NotificationActionResponse()


@router.post("/{notification_id}/unread", response_model=NotificationActionResponse)
async def mark_as_unread(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    student: Principal = Depends(get_current_student),
) -> NotificationActionResponse:
    try:
        await service.mark_as_unread(db, int(student.id), notification_id, student)
    except ServiceError as e:
        _handle_service_error(e)
    return NotificationActionResponse()


@router.delete("/{notification_id}", response_model=NotificationActionResponse)
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    student: Principal = Depends(get_current_student),
) -> NotificationActionResponse:
    try:
        await service.delete_notification(db, int(student.id), notification_id, student)
    except ServiceError as e:
        _handle_service_error(e)
    return NotificationActionResponse()
