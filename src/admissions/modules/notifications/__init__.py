"""
Notifications Module

Per-student notifications produced from application status changes and
calendar publications, and the recipient's read/unread/delete operations.
"""

from .router import router
from .service import register_notification_handlers

__all__ = ["router", "register_notification_handlers"]
