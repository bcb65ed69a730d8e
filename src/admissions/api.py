from fastapi import APIRouter

from admissions.modules.applications import router as applications_router
from admissions.modules.applications.admin_router import router as admin_applications_router
from admissions.modules.auth import router as auth_router
from admissions.modules.calendar import router as calendar_router
from admissions.modules.notifications import router as notifications_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(
    admin_applications_router,
    prefix="/admin/applications",
    tags=["Admin - Applications"],
)

api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])

api_router.include_router(calendar_router, prefix="/calendar", tags=["Calendar"])
