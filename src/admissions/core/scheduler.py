"""
Background Job Scheduler

Scheduled task execution using APScheduler with AsyncIO support.

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Jobs open their own database session and commit atomically
- Failed jobs are logged but don't crash the scheduler
- Jobs can be triggered manually for maintenance and testing

Usage:
    from admissions.core.scheduler import register_job, start_scheduler, stop_scheduler

    register_job("backfill_temporary_passwords", run_job, DateTrigger())
    await start_scheduler()   # jobs registered earlier are added here
    ...
    await stop_scheduler()
"""

import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Coroutine[Any, Any, Any]]

# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None

# job_id -> (func, trigger); kept for manual triggering and for jobs
# registered before the scheduler starts
_job_registry: dict[str, tuple[JobFunc, BaseTrigger | None]] = {}


class SchedulerConfig:
    """Configuration for the background scheduler."""

    TIMEZONE = "UTC"

    JOB_COALESCE = True  # Combine multiple missed executions into one
    JOB_MAX_INSTANCES = 1  # Only one instance of each job can run at a time
    JOB_MISFIRE_GRACE_TIME = 60 * 5

    EXECUTORS = {
        "default": {"type": "asyncio"},
    }

    JOB_DEFAULTS = {
        "coalesce": JOB_COALESCE,
        "max_instances": JOB_MAX_INSTANCES,
        "misfire_grace_time": JOB_MISFIRE_GRACE_TIME,
    }


def _job_listener(event: JobExecutionEvent) -> None:
    """Log job execution results."""
    if event.exception:
        logger.error(
            f"Job {event.job_id} failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now(UTC).isoformat()}")


def get_scheduler() -> AsyncIOScheduler | None:
    """Return the running scheduler, or None if not started."""
    return _scheduler


def _add_to_scheduler(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    assert _scheduler is not None
    _scheduler.add_job(func, trigger=trigger, id=job_id, replace_existing=True)
    logger.info(f"Registered job: {job_id}")


async def start_scheduler() -> AsyncIOScheduler:
    """
    Create and start the scheduler, adding every job registered so far.

    Returns:
        The started scheduler instance
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("Scheduler already running, returning existing instance")
        return _scheduler

    logger.info("Initializing background job scheduler...")

    _scheduler = AsyncIOScheduler(
        timezone=SchedulerConfig.TIMEZONE,
        executors=SchedulerConfig.EXECUTORS,
        job_defaults=SchedulerConfig.JOB_DEFAULTS,
    )
    _scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job_id, (func, trigger) in _job_registry.items():
        if trigger is not None:
            _add_to_scheduler(job_id, func, trigger)

    _scheduler.start()

    logger.info(f"Background job scheduler started with {len(_scheduler.get_jobs())} jobs")
    return _scheduler


async def stop_scheduler() -> None:
    """Stop the scheduler, waiting for running jobs to finish."""
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        logger.debug("Scheduler not running, nothing to stop")
        _scheduler = None
        return

    logger.info("Stopping background job scheduler...")
    _scheduler.shutdown(wait=True)
    logger.info("Background job scheduler stopped")
    _scheduler = None


def register_job(
    job_id: str,
    func: JobFunc,
    trigger: BaseTrigger | None = None,
) -> None:
    """
    Register a job.

    Jobs registered before ``start_scheduler`` are added when it starts.
    A job without a trigger is only available for manual execution.

    Example:
        register_job(
            job_id="backfill_temporary_passwords",
            func=run_backfill_job,
            trigger=DateTrigger(),
        )
    """
    _job_registry[job_id] = (func, trigger)

    if _scheduler is None:
        logger.debug(f"Scheduler not initialized, job {job_id} will be added on start")
        return

    if trigger is not None:
        _add_to_scheduler(job_id, func, trigger)


def clear_registry() -> None:
    """Forget every registered job (used on shutdown and by tests)."""
    _job_registry.clear()


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job immediately, bypassing the scheduler.

    Returns:
        Dict with job_id, status ("success" or "error"), executed_at,
        the job's own result when it returns one, and error on failure

    Raises:
        ValueError: If job_id is not registered
    """
    if job_id not in _job_registry:
        raise ValueError(
            f"Job {job_id} not found in registry. Available jobs: {list(_job_registry.keys())}"
        )

    func, _ = _job_registry[job_id]
    executed_at = datetime.now(UTC)

    logger.info(f"Manually triggering job: {job_id}")

    try:
        result = await func()
    except Exception as e:
        logger.error(f"Manual execution of job {job_id} failed: {e}", exc_info=True)
        return {
            "job_id": job_id,
            "status": "error",
            "executed_at": executed_at.isoformat(),
            "error": str(e),
        }

    logger.info(f"Manual execution of job {job_id} completed successfully")
    response: dict[str, Any] = {
        "job_id": job_id,
        "status": "success",
        "executed_at": executed_at.isoformat(),
    }
    if result is not None:
        response["result"] = result
    return response


def list_registered_jobs() -> list[dict[str, Any]]:
    """
    List registered jobs and their schedule.

    Returns:
        List of dicts with job_id, registered, and (when the scheduler is
        running) next_run_time and is_paused
    """
    jobs = []

    for job_id in _job_registry:
        job_info: dict[str, Any] = {"job_id": job_id, "registered": True}

        if _scheduler is not None:
            scheduled_job = _scheduler.get_job(job_id)
            if scheduled_job and scheduled_job.next_run_time:
                job_info["next_run_time"] = scheduled_job.next_run_time.isoformat()
                job_info["is_paused"] = False
            else:
                job_info["next_run_time"] = None
                job_info["is_paused"] = scheduled_job is not None

        jobs.append(job_info)

    return jobs


def pause_job(job_id: str) -> bool:
    """Pause a scheduled job. Returns False if it is not scheduled."""
    if _scheduler is None:
        logger.warning("Cannot pause job: scheduler not initialized")
        return False

    if _scheduler.get_job(job_id):
        _scheduler.pause_job(job_id)
        logger.info(f"Paused job: {job_id}")
        return True

    logger.warning(f"Job not found for pausing: {job_id}")
    return False


def resume_job(job_id: str) -> bool:
    """Resume a paused job. Returns False if it is not scheduled."""
    if _scheduler is None:
        logger.warning("Cannot resume job: scheduler not initialized")
        return False

    if _scheduler.get_job(job_id):
        _scheduler.resume_job(job_id)
        logger.info(f"Resumed job: {job_id}")
        return True

    logger.warning(f"Job not found for resuming: {job_id}")
    return False
