"""
Rate Limiting Module

Sliding-window rate limiting for administrative endpoints. Uses the shared
Redis client when it is available and falls back to process-local memory
otherwise.

Limited endpoints:
- Admission decisions (prevents mass approve/reject clicks)
- Backfill runs
- Calendar publication (each one fans out a notification per student)
"""

import logging
import time

from fastapi import HTTPException, status
from redis.asyncio import Redis
from redis.exceptions import RedisError

from admissions.core.auth import Principal
from admissions.core.redis import get_redis

logger = logging.getLogger(__name__)

# key -> request timestamps inside the current window
_memory_store: dict[str, list[float]] = {}


class RateLimitExceeded(HTTPException):
    """Raised when a caller exceeds its request budget."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _check_rate_limit_redis(
    client: Redis,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Sliding window over a Redis sorted set.

    Returns:
        True if the request is allowed
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(key: str, limit: int, window_seconds: int) -> bool:
    """
    In-memory fallback. Only limits within a single process.

    Returns:
        True if the request is allowed
    """
    now = time.time()
    window_start = now - window_seconds

    hits = [ts for ts in _memory_store.get(key, []) if ts > window_start]
    if len(hits) >= limit:
        _memory_store[key] = hits
        return False

    hits.append(now)
    _memory_store[key] = hits
    return True


async def check_rate_limit(key: str, limit: int, window_seconds: int) -> bool:
    """
    Check whether a request identified by ``key`` is within its budget.

    Tries Redis first and falls back to memory when Redis is not configured
    or the call fails.
    """
    client = get_redis()
    if client is not None:
        try:
            return await _check_rate_limit_redis(client, key, limit, window_seconds)
        except RedisError as e:
            logger.warning(f"Redis rate limit check failed, using memory: {e}")

    return _check_rate_limit_memory(key, limit, window_seconds)


async def check_admin_rate_limit(
    admin: Principal,
    action: str,
    limit: int,
    window_seconds: int,
) -> None:
    """
    Enforce a per-administrator budget for an action.

    Raises:
        RateLimitExceeded: If the budget is used up
    """
    key = f"admin:{action}:{admin.id}"
    if not await check_rate_limit(key, limit, window_seconds):
        logger.warning(
            f"Rate limit exceeded for admin {admin.id} on action '{action}': "
            f"{limit}/{window_seconds}s"
        )
        raise RateLimitExceeded(limit, window_seconds)


def reset_memory_store() -> None:
    """Clear the in-memory counters."""
    _memory_store.clear()


__all__ = [
    "RateLimitExceeded",
    "check_admin_rate_limit",
    "check_rate_limit",
    "reset_memory_store",
]
