"""
Pytest configuration for pgcrud.

Provides fixtures for:
- Recording fake executors (unit tests, no database)
- Registry isolation
- Database connection management for integration tests
"""

from __future__ import annotations

import os
from typing import Any, Dict, Generator, List, Mapping, Sequence, Tuple

import psycopg
import pytest

from pgcrud.config import Settings
from pgcrud.mapping.registry import MappingRegistry, get_registry


class RecordingExecutor:
    """
    Executor double that records every statement and replays canned results.
    """

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]] = (),
        affected: int = 1,
        error: Exception | None = None,
    ) -> None:
        self.rows: List[Dict[str, Any]] = [dict(row) for row in rows]
        self.affected = affected
        self.error = error
        self.calls: List[Tuple[str, str, Tuple[Any, ...]]] = []

    def fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        self.calls.append(("fetch", sql, tuple(params)))
        if self.error is not None:
            raise self.error
        return self.rows

    def execute(self, sql: str, params: Sequence[Any]) -> int:
        self.calls.append(("execute", sql, tuple(params)))
        if self.error is not None:
            raise self.error
        return self.affected


class AsyncRecordingExecutor(RecordingExecutor):
    async def fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:  # type: ignore[override]
        return RecordingExecutor.fetch(self, sql, params)

    async def execute(self, sql: str, params: Sequence[Any]) -> int:  # type: ignore[override]
        return RecordingExecutor.execute(self, sql, params)


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def async_executor() -> AsyncRecordingExecutor:
    return AsyncRecordingExecutor()


@pytest.fixture
def registry() -> MappingRegistry:
    """A private registry, isolated from the process-wide one."""
    return MappingRegistry()


@pytest.fixture(autouse=True)
def _reset_default_registry() -> Generator[None, None, None]:
    """Keep models registered by one test from leaking into the next."""
    yield
    get_registry().clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "pgcrud"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide an autocommit database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()
