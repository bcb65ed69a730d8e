"""
Admissions API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Database and Redis connections
- Event handlers for decision history and notifications
- Background job scheduler (temporary password backfill)
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from admissions.api import api_router
from admissions.core.auth import Principal, get_current_admin_user
from admissions.core.config import settings
from admissions.core.database import async_session_maker, close_db, init_db
from admissions.core.redis import close_redis, get_redis, init_redis
from admissions.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from admissions.modules.applications import register_application_jobs, register_history_handlers
from admissions.modules.notifications import register_notification_handlers

logging.basicConfig(
    level=logging.DEBUG if settings.database_echo else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


def register_event_handlers() -> None:
    """Subscribe follow-on effects of status changes and calendar publications."""
    register_history_handlers()
    register_notification_handlers()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Redis connection
    - Database connection
    - Event handlers
    - Background job scheduler
    """
    # Startup
    print(f"Starting Admissions API in {settings.python_env} mode...")

    # Initialize Redis (rate limiting falls back to memory without it)
    try:
        await init_redis()
        print("[OK] Redis connected")
    except Exception as e:
        print(f"[FAIL] Redis connection failed: {e}")
        if settings.is_production:
            raise

    # Initialize Database
    try:
        await init_db()
        print("[OK] Database connected")
    except Exception as e:
        print(f"[FAIL] Database connection failed: {e}")
        if settings.is_production:
            raise

    register_event_handlers()
    print("[OK] Event handlers registered")

    # Initialize Background Job Scheduler
    try:
        # Register jobs before starting the scheduler
        register_application_jobs(run_on_startup=settings.run_backfill_on_startup)

        await start_scheduler()
        print("[OK] Background scheduler started")
    except Exception as e:
        print(f"[FAIL] Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield  # Application runs here

    # Shutdown
    print("Shutting down Admissions API...")

    # Stop the scheduler first (wait for running jobs)
    await stop_scheduler()
    print("[OK] Background scheduler stopped")

    await close_redis()
    await close_db()
    print("[OK] Cleanup complete")


app = FastAPI(
    title="Admissions API",
    description="Student admission lifecycle and account identifier service",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the Admissions API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/debug/db", tags=["Debug"])
async def debug_db(_admin: Principal = Depends(get_current_admin_user)):
    """Test database connection."""
    try:
        async with async_session_maker() as session:
            result = await session.execute(text("SELECT 1"))
            return {"database": "connected", "result": result.scalar()}
    except Exception as e:
        return {"database": "error", "message": str(e)}


@app.get("/debug/redis", tags=["Debug"])
async def debug_redis(_admin: Principal = Depends(get_current_admin_user)):
    """Test Redis connection."""
    client = get_redis()
    if client is None:
        return {"redis": "not initialized"}
    try:
        await client.ping()
        return {"redis": "connected"}
    except Exception as e:
        return {"redis": "error", "message": str(e)}


# ============================================
# Background Job Debug Endpoints
# ============================================


@app.get("/debug/jobs", tags=["Debug"])
async def list_jobs(_admin: Principal = Depends(get_current_admin_user)):
    """List registered background jobs with next run time and pause status."""
    return {"jobs": list_registered_jobs()}


@app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"])
async def trigger_job(job_id: str, _admin: Principal = Depends(get_current_admin_user)):
    """
    Run a background job immediately, bypassing its schedule.

    Available jobs:
        - applications_backfill_temporary_passwords

    Raises:
        HTTPException 400: If job_id is not registered
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/debug/jobs/{job_id}/pause", tags=["Debug"])
async def pause_job_endpoint(job_id: str, _admin: Principal = Depends(get_current_admin_user)):
    return {"job_id": job_id, "paused": pause_job(job_id)}


@app.post("/debug/jobs/{job_id}/resume", tags=["Debug"])
async def resume_job_endpoint(job_id: str, _admin: Principal = Depends(get_current_admin_user)):
    return {"job_id": job_id, "resumed": resume_job(job_id)}
