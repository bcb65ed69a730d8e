"""
Unit tests for account identifier allocation.

These tests cover:
- Checksum and formatting
- Sequence continuation from the latest identifier of the year
- Collision retries and the optional attempt bound
- Malformed stored identifiers
- Sequence space exhaustion
"""

import logging
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from admissions.modules.applications.errors import IdentifierAllocationError
from admissions.modules.applications.identifiers import (
    AllocationOutcome,
    allocate_account_identifier,
    compute_checksum,
    format_identifier,
    is_valid_identifier,
    parse_sequence,
    try_candidate,
    year_prefix,
)

REPOSITORY = "admissions.modules.applications.identifiers.repository"


class TestFormatting:
    def test_checksum_is_deterministic_and_bounded(self):
        for year in (1999, 2000, 2025, 2099):
            for sequence in (1, 7, 999, 1000, 9999):
                checksum = compute_checksum(year, sequence)
                assert 0 <= checksum <= 999
                assert checksum == compute_checksum(year, sequence)

    def test_known_values(self):
        assert compute_checksum(2025, 1) == 1
        assert compute_checksum(2025, 1234) == 234
        assert format_identifier(2025, 1) == "25-0001-001"
        assert format_identifier(2025, 42) == "25-0042-042"
        assert format_identifier(2007, 9999) == "07-9999-999"

    def test_year_prefix_is_two_digits(self):
        assert year_prefix(2025) == "25-"
        assert year_prefix(2100) == "00-"

    def test_identifier_shape(self):
        assert is_valid_identifier("25-0001-001")
        assert not is_valid_identifier("25-1-1")
        assert not is_valid_identifier("2025-0001-001")

    def test_parse_sequence(self):
        assert parse_sequence("25-0042-042") == 42
        assert parse_sequence("25-garbage") is None
        assert parse_sequence("25-ABCD-001") is None


class TestAllocate:
    @pytest.mark.asyncio
    async def test_first_identifier_of_the_year(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value=None)
            mock_repo.exists_by_identifier = AsyncMock(return_value=False)

            identifier = await allocate_account_identifier(mock_db, date(2025, 3, 1))

        assert identifier == "25-0001-001"
        mock_repo.find_latest_identifier_with_prefix.assert_awaited_once_with(mock_db, "25-")

    @pytest.mark.asyncio
    async def test_continues_after_latest(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value="25-0041-041")
            mock_repo.exists_by_identifier = AsyncMock(return_value=False)

            identifier = await allocate_account_identifier(mock_db, date(2025, 11, 30))

        assert identifier == "25-0042-042"

    @pytest.mark.asyncio
    async def test_retries_past_collisions(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value="25-0007-007")
            mock_repo.exists_by_identifier = AsyncMock(side_effect=[True, True, False])

            identifier = await allocate_account_identifier(mock_db, date(2025, 1, 1))

        assert identifier == "25-0010-010"
        checked = [call.args[1] for call in mock_repo.exists_by_identifier.await_args_list]
        assert checked == ["25-0008-008", "25-0009-009", "25-0010-010"]

    @pytest.mark.asyncio
    async def test_malformed_latest_restarts_at_one(self, mock_db, caplog):
        with (
            caplog.at_level(logging.WARNING),
            patch(REPOSITORY) as mock_repo,
        ):
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value="25-garbage")
            mock_repo.exists_by_identifier = AsyncMock(return_value=False)

            identifier = await allocate_account_identifier(mock_db, date(2025, 6, 1))

        assert identifier == "25-0001-001"
        assert "malformed" in caplog.text

    @pytest.mark.asyncio
    async def test_attempt_bound(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value=None)
            mock_repo.exists_by_identifier = AsyncMock(return_value=True)

            with pytest.raises(IdentifierAllocationError, match="3 attempts"):
                await allocate_account_identifier(mock_db, date(2025, 1, 1), max_attempts=3)

        assert mock_repo.exists_by_identifier.await_count == 3

    @pytest.mark.asyncio
    async def test_sequence_space_exhausted(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.find_latest_identifier_with_prefix = AsyncMock(return_value="25-9999-999")
            mock_repo.exists_by_identifier = AsyncMock(return_value=False)

            with pytest.raises(IdentifierAllocationError, match="exhausted"):
                await allocate_account_identifier(mock_db, date(2025, 1, 1))

        mock_repo.exists_by_identifier.assert_not_awaited()


class TestTryCandidate:
    @pytest.mark.asyncio
    async def test_outcomes(self, mock_db):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.exists_by_identifier = AsyncMock(side_effect=[False, True])

            free = await try_candidate(mock_db, 2025, 5)
            taken = await try_candidate(mock_db, 2025, 6)
            beyond = await try_candidate(mock_db, 2025, 10000)

        assert free.outcome == AllocationOutcome.ALLOCATED
        assert free.identifier == "25-0005-005"
        assert taken.outcome == AllocationOutcome.RETRY
        assert taken.identifier is None
        assert beyond.outcome == AllocationOutcome.FAILED
