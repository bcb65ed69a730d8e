"""
Unit tests for the background job scheduler registry.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from apscheduler.triggers.interval import IntervalTrigger

from admissions.core import scheduler
from admissions.core.scheduler import (
    clear_registry,
    list_registered_jobs,
    pause_job,
    register_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)


async def hourly_job():
    return None


@pytest_asyncio.fixture(autouse=True)
async def clean_scheduler():
    clear_registry()
    yield
    await stop_scheduler()
    clear_registry()


class TestTriggerJobManually:
    @pytest.mark.asyncio
    async def test_returns_job_result(self):
        register_job("sample", AsyncMock(return_value={"repaired": 2}))

        response = await trigger_job_manually("sample")

        assert response["job_id"] == "sample"
        assert response["status"] == "success"
        assert response["result"] == {"repaired": 2}
        assert "executed_at" in response

    @pytest.mark.asyncio
    async def test_job_without_result(self):
        register_job("sample", AsyncMock(return_value=None))

        response = await trigger_job_manually("sample")

        assert response["status"] == "success"
        assert "result" not in response

    @pytest.mark.asyncio
    async def test_failing_job_reports_error(self):
        register_job("sample", AsyncMock(side_effect=RuntimeError("db down")))

        response = await trigger_job_manually("sample")

        assert response["status"] == "error"
        assert response["error"] == "db down"

    @pytest.mark.asyncio
    async def test_unknown_job_raises(self):
        with pytest.raises(ValueError, match="not found"):
            await trigger_job_manually("missing")


class TestRegistry:
    @pytest.mark.asyncio
    async def test_list_before_start(self):
        register_job("manual_only", AsyncMock())

        assert list_registered_jobs() == [{"job_id": "manual_only", "registered": True}]

    @pytest.mark.asyncio
    async def test_pause_without_scheduler(self):
        assert pause_job("anything") is False
        assert resume_job("anything") is False


class TestSchedulerLifecycle:
    @pytest.mark.asyncio
    async def test_start_adds_triggered_jobs_only(self):
        register_job("periodic", hourly_job, IntervalTrigger(hours=1))
        register_job("manual_only", AsyncMock())

        running = await start_scheduler()

        assert running.get_job("periodic") is not None
        assert running.get_job("manual_only") is None

        jobs = {job["job_id"]: job for job in list_registered_jobs()}
        assert jobs["periodic"]["is_paused"] is False
        assert jobs["periodic"]["next_run_time"] is not None
        assert jobs["manual_only"]["next_run_time"] is None
        assert jobs["manual_only"]["is_paused"] is False

    @pytest.mark.asyncio
    async def test_pause_and_resume(self):
        register_job("periodic", hourly_job, IntervalTrigger(hours=1))
        await start_scheduler()

        assert pause_job("periodic") is True
        assert {job["job_id"]: job for job in list_registered_jobs()}["periodic"]["is_paused"]
        assert resume_job("periodic") is True
        assert pause_job("unknown") is False

    @pytest.mark.asyncio
    async def test_stop_clears_scheduler(self):
        await start_scheduler()
        await stop_scheduler()

        assert scheduler.get_scheduler() is None
