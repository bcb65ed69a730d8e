"""
Student Applications Module

Handles the student admission workflow:
1. Registration and application submission
2. Administrator approval/rejection with account identifier allocation
3. Temporary credential issuance and first-login password change
4. Immutable decision history
5. Startup backfill of inconsistent temporary credentials

API Endpoints:
- POST /applications/register - Register an applicant
- GET /applications/{id} - Get the application
- POST /applications/{id}/submit - Submit for review
- GET /applications/{id}/history - Decision history
- POST /applications/{id}/password - Replace the temporary password
- POST /admin/applications/{id}/decision - Approve or reject
- POST /admin/applications/{id}/deactivate - Deactivate
- POST /admin/applications/backfill - Backfill temporary passwords

Background Jobs (via APScheduler):
- applications_backfill_temporary_passwords: once at startup, manual afterwards
"""

from .history import register_history_handlers
from .jobs import register_application_jobs
from .router import router

__all__ = ["router", "register_application_jobs", "register_history_handlers"]
