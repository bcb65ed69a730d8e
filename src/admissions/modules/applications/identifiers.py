"""
Account Identifier Allocation

Approved students receive an account identifier of the form ``YY-NNNN-CCC``:

- ``YY``   two-digit year of approval
- ``NNNN`` zero-padded sequence, increasing within the year
- ``CCC``  zero-padded checksum of year and sequence

Allocation reads the latest identifier for the year without locking and
re-checks each candidate for existence, moving to the next sequence on a
collision. The UNIQUE constraint on ``account_identifier`` backs the check
at commit time.
"""

import enum
import logging
import re
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from . import repository
from .errors import IdentifierAllocationError

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^\d{2}-\d{4}-\d{3}$")

MAX_SEQUENCE = 9999


def compute_checksum(year: int, sequence: int) -> int:
    """
    Checksum for a (year, sequence) pair, in ``[0, 999]``.

    A transcription aid, not a cryptographic check.
    """
    base = (year % 100) * 10000 + sequence
    return base % 1000


def year_prefix(year: int) -> str:
    return f"{year % 100:02d}-"


def format_identifier(year: int, sequence: int) -> str:
    """Format ``YY-NNNN-CCC`` for the given year and sequence."""
    checksum = compute_checksum(year, sequence)
    return f"{year % 100:02d}-{sequence:04d}-{checksum:03d}"


def is_valid_identifier(value: str) -> bool:
    return bool(IDENTIFIER_PATTERN.match(value))


def parse_sequence(identifier: str) -> int | None:
    """Extract the sequence segment, or None if the identifier is malformed."""
    parts = identifier.split("-")
    if len(parts) != 3 or not parts[1].isdigit():
        return None
    return int(parts[1])


class AllocationOutcome(str, enum.Enum):
    ALLOCATED = "allocated"
    RETRY = "retry"
    FAILED = "failed"


@dataclass(frozen=True)
class AllocationAttempt:
    """Result of checking a single candidate identifier."""

    outcome: AllocationOutcome
    sequence: int
    identifier: str | None = None
    reason: str | None = None


async def next_sequence(db: AsyncSession, year: int) -> int:
    """
    First candidate sequence for the year: latest + 1, or 1.

    A latest identifier that does not parse falls back to 1 with a warning,
    since it points at irregular data in storage.
    """
    prefix = year_prefix(year)
    latest = await repository.find_latest_identifier_with_prefix(db, prefix)
    if latest is None:
        return 1

    sequence = parse_sequence(latest)
    if sequence is None:
        logger.warning(
            f"Latest account identifier {latest!r} for prefix {prefix!r} is malformed, "
            "restarting sequence at 1"
        )
        return 1
    return sequence + 1


async def try_candidate(db: AsyncSession, year: int, sequence: int) -> AllocationAttempt:
    """Check one candidate sequence and report whether it can be used."""
    if sequence > MAX_SEQUENCE:
        return AllocationAttempt(
            outcome=AllocationOutcome.FAILED,
            sequence=sequence,
            reason=f"sequence space exhausted for year {year}",
        )

    candidate = format_identifier(year, sequence)
    if await repository.exists_by_identifier(db, candidate):
        return AllocationAttempt(outcome=AllocationOutcome.RETRY, sequence=sequence)

    return AllocationAttempt(
        outcome=AllocationOutcome.ALLOCATED, sequence=sequence, identifier=candidate
    )


async def allocate_account_identifier(
    db: AsyncSession,
    approval_date: date,
    max_attempts: int | None = None,
) -> str:
    """
    Allocate the next free account identifier for the approval year.

    Args:
        db: Database session
        approval_date: Date of the approval; its year selects the prefix
        max_attempts: Bound on candidates checked; None means unbounded

    Returns:
        The allocated identifier (not yet persisted)

    Raises:
        IdentifierAllocationError: If the year's sequence space is exhausted
            or max_attempts candidates all collided
    """
    year = approval_date.year
    sequence = await next_sequence(db, year)
    attempts = 0

    while True:
        attempt = await try_candidate(db, year, sequence)
        attempts += 1

        if attempt.outcome == AllocationOutcome.ALLOCATED:
            if attempts > 1:
                logger.info(f"Allocated account identifier after {attempts} attempts")
            return attempt.identifier

        if attempt.outcome == AllocationOutcome.FAILED:
            logger.error(f"Account identifier allocation failed: {attempt.reason}")
            raise IdentifierAllocationError(attempt.reason)

        logger.debug(f"Account identifier sequence {sequence} for {year} is taken, retrying")
        if max_attempts is not None and attempts >= max_attempts:
            raise IdentifierAllocationError(f"no free identifier after {attempts} attempts")
        sequence += 1
