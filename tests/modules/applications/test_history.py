"""
Unit tests for the decision history recorder.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from admissions.modules.applications.events import ApplicationStatusChanged
from admissions.modules.applications.history import handle_status_changed, record_transition
from admissions.modules.applications.models import ApplicationHistoryEntry, ApplicationStatus

REPOSITORY = "admissions.modules.applications.history.repository"


class TestRecordTransition:
    @pytest.mark.asyncio
    async def test_decision_is_recorded_with_actor_snapshot(self, mock_db, admin_principal):
        entry = MagicMock(spec=ApplicationHistoryEntry)
        with patch(REPOSITORY) as mock_repo:
            mock_repo.append_history_entry = AsyncMock(return_value=entry)

            result = await record_transition(
                mock_db,
                application_id=4,
                previous_status=ApplicationStatus.PENDING,
                new_status=ApplicationStatus.REJECTED,
                remarks="Incomplete",
                actor=admin_principal,
            )

        assert result is entry
        mock_repo.append_history_entry.assert_awaited_once_with(
            mock_db,
            application_id=4,
            status=ApplicationStatus.REJECTED,
            remarks="Incomplete",
            processed_by_id="admin-1",
            processed_by_name="Maria Santos",
        )

    @pytest.mark.asyncio
    async def test_name_falls_back_to_email(self, mock_db, unnamed_admin_principal):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.append_history_entry = AsyncMock()

            await record_transition(
                mock_db,
                4,
                ApplicationStatus.PENDING,
                ApplicationStatus.APPROVED,
                None,
                unnamed_admin_principal,
            )

        kwargs = mock_repo.append_history_entry.await_args.kwargs
        assert kwargs["processed_by_name"] == "deputy@school.edu"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "previous,new",
        [
            (ApplicationStatus.REGISTERED, ApplicationStatus.PENDING),
            (ApplicationStatus.APPROVED, ApplicationStatus.INACTIVE),
            (ApplicationStatus.APPROVED, ApplicationStatus.APPROVED),
        ],
    )
    async def test_non_decisions_are_skipped(self, mock_db, admin_principal, previous, new):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.append_history_entry = AsyncMock()

            result = await record_transition(mock_db, 4, previous, new, None, admin_principal)

        assert result is None
        mock_repo.append_history_entry.assert_not_awaited()


class TestHandleStatusChanged:
    @pytest.mark.asyncio
    async def test_respects_record_history_flag(self, mock_db, admin_principal):
        event = ApplicationStatusChanged(
            application_id=4,
            previous_status=ApplicationStatus.PENDING,
            new_status=ApplicationStatus.APPROVED,
            actor=admin_principal,
            record_history=False,
        )
        with patch(REPOSITORY) as mock_repo:
            mock_repo.append_history_entry = AsyncMock()

            await handle_status_changed(mock_db, event)

        mock_repo.append_history_entry.assert_not_awaited()
