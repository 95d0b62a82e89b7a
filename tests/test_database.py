"""
Tests for the database helpers that do not need a running database
"""
import asyncio

import pytest

from ohmage.database.queries import (
    TRANSIENT_CONNECTION,
    TRANSIENT_POOL,
    TRANSIENT_TIMEOUT,
    classify_error,
    execute_with_retry,
)
from ohmage.utils.url_builder import build_async_url, ssl_required


class FlakySession:
    """Fails with the given errors before returning a result"""

    def __init__(self, *errors):
        self.errors = list(errors)
        self.calls = 0

    async def execute(self, query):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "result"


def test_build_async_url():
    assert build_async_url("postgres://u:p@host:5432/db?sslmode=require") == "postgresql+asyncpg://u:p@host:5432/db"
    assert build_async_url("postgresql://u:p@host/db?application_name=x") == (
        "postgresql+asyncpg://u:p@host/db?application_name=x"
    )
    assert build_async_url("postgresql+psycopg2://u@host/db") == "postgresql+asyncpg://u@host/db"
    assert build_async_url("sqlite:///local.db") == "sqlite:///local.db"
    assert build_async_url("") == ""


def test_ssl_required():
    assert ssl_required("postgres://host/db?sslmode=require")
    assert not ssl_required("postgres://host/db")
    assert ssl_required("postgres://host/db", "verify-full")
    assert not ssl_required("postgres://host/db?sslmode=require", "disable")


def test_classify_error():
    assert classify_error(Exception("FATAL: MaxClientsInSessionMode")) == TRANSIENT_POOL
    assert classify_error(Exception("connection was closed in the middle of operation")) == TRANSIENT_CONNECTION
    assert classify_error(asyncio.TimeoutError()) == TRANSIENT_TIMEOUT
    assert classify_error(Exception("statement timeout")) == TRANSIENT_TIMEOUT
    assert classify_error(Exception('duplicate key value violates unique constraint "users_pkey"')) is None


def test_execute_with_retry_retries_transient_errors():
    session = FlakySession(Exception("connection reset by peer"))

    result = asyncio.run(execute_with_retry(session, "SELECT 1", initial_delay=0))

    assert result == "result"
    assert session.calls == 2


def test_execute_with_retry_raises_permanent_errors():
    session = FlakySession(ValueError("syntax error at or near SELEC"))

    with pytest.raises(ValueError):
        asyncio.run(execute_with_retry(session, "SELEC 1", initial_delay=0))
    assert session.calls == 1


def test_execute_with_retry_gives_up():
    session = FlakySession(*[Exception("max clients reached")] * 3)

    with pytest.raises(Exception, match="max clients reached"):
        asyncio.run(execute_with_retry(session, "SELECT 1", max_retries=3, initial_delay=0))
    assert session.calls == 3
