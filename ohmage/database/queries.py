"""
Database query utilities with retry logic
"""
import asyncio
from typing import Optional, Any
from sqlalchemy.ext.asyncio import AsyncSession


TRANSIENT_POOL = "pool"
TRANSIENT_CONNECTION = "connection"
TRANSIENT_TIMEOUT = "timeout"


def classify_error(error: Exception) -> Optional[str]:
    """
    Decide whether a database error is worth retrying

    Args:
        error: The exception raised by the driver or SQLAlchemy

    Returns:
        TRANSIENT_POOL, TRANSIENT_CONNECTION or TRANSIENT_TIMEOUT, or None if
        the error is permanent (syntax errors, constraint violations, ...)
    """
    message = str(error).lower()
    error_type = type(error).__name__

    if "maxclientsinsessionmode" in message or "max clients reached" in message or "connection pool" in message:
        return TRANSIENT_POOL
    if "connection" in message and any(word in message for word in ("closed", "lost", "reset")):
        return TRANSIENT_CONNECTION
    if error_type in ("TimeoutError", "CancelledError") or "timeout" in message:
        return TRANSIENT_TIMEOUT
    return None


async def execute_with_retry(
    session: AsyncSession,
    query: Any,
    max_retries: int = 3,
    initial_delay: float = 0.5
) -> Any:
    """
    Execute query, retrying transient errors with exponential backoff

    Args:
        session: Database session
        query: SQLAlchemy query object
        max_retries: Maximum number of attempts
        initial_delay: Delay before the first retry; doubles each attempt and
            doubles again for timeouts

    Returns:
        Query result

    Raises:
        Exception: The last error once retries are exhausted, or any
            permanent error immediately
    """
    for attempt in range(max_retries):
        try:
            return await session.execute(query)
        except Exception as e:
            kind = classify_error(e)
            summary = f"{type(e).__name__}: {str(e)[:200]}"
            print(f"Database error on attempt {attempt + 1}/{max_retries}: {summary}")

            if kind is None:
                print(f"Non-retryable error: {summary}")
                raise
            if attempt == max_retries - 1:
                print(f"Max retries reached, failing with: {summary}")
                raise

            delay = initial_delay * (2 ** attempt)
            if kind == TRANSIENT_TIMEOUT:
                delay *= 2
            print(f"Retrying after {delay}s ({kind})...")
            await asyncio.sleep(delay)

    raise RuntimeError("execute_with_retry called with max_retries < 1")
