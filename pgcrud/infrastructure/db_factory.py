"""
Database connection factory utilities for pgcrud.

Provides centralized management of sync and async PostgreSQL connections/pools
with proper lifecycle management. The PoolManager singleton ensures resources
are properly cleaned up on application exit.

Retry logic (tenacity) applies to acquiring connections only. Statements run
by the CRUD layer are never retried.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import AsyncConnection, Connection
from psycopg_pool import AsyncConnectionPool, ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from pgcrud.config import get_settings
from pgcrud.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    settings = get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class PoolManager:
    """
    Thread-safe singleton for managing database connection pools.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._sync_pool = None
                instance._async_pool = None
                cls._instance = instance
                atexit.register(instance.close_all)
            return cls._instance

    def get_sync_pool(self, min_size: int = 1, max_size: int = 10) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.
        """
        with self._lock:
            if self._sync_pool is None:
                self._sync_pool = ConnectionPool(
                    conninfo=build_dsn(), min_size=min_size, max_size=max_size, open=True
                )
                log.info("Sync pool created", extra={"min_size": min_size, "max_size": max_size})
            return self._sync_pool

    def get_async_pool(self, min_size: int = 1, max_size: int = 10) -> AsyncConnectionPool:
        """
        Get or create the asynchronous connection pool.

        The pool is created closed; callers ``await pool.open()`` from a
        running event loop before first use.
        """
        with self._lock:
            if self._async_pool is None:
                self._async_pool = AsyncConnectionPool(
                    conninfo=build_dsn(), min_size=min_size, max_size=max_size, open=False
                )
                log.info("Async pool created", extra={"min_size": min_size, "max_size": max_size})
            return self._async_pool

    @contextmanager
    def sync_connection(self) -> Generator[Connection, None, None]:
        """
        Context manager for obtaining a sync connection from the pool.

        Example
        -------
            manager = PoolManager()
            with manager.sync_connection() as conn:
                Order.find_by_key(PsycopgExecutor(conn), 42)
        """
        pool = self.get_sync_pool()
        with pool.connection() as conn:
            yield conn

    def close_all(self) -> None:
        """
        Close all managed pools and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except Exception:  # noqa: BLE001 - best-effort cleanup at shutdown
                    log.warning("Failed to close sync pool", exc_info=True)
                finally:
                    self._sync_pool = None
            if self._async_pool is not None and not self._async_pool.closed:
                # AsyncConnectionPool.close() is a coroutine; it needs aclose_all().
                log.warning(
                    "Async pool still open at close_all; await aclose_all() from its event loop"
                )
            self._async_pool = None

    async def aclose_all(self) -> None:
        """
        Close the async pool from its owning event loop, then the sync pool.
        """
        with self._lock:
            pool, self._async_pool = self._async_pool, None
        if pool is not None:
            await pool.close()
            log.info("Async pool closed")
        self.close_all()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn(), connect_timeout=get_settings().db_connect_timeout)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, OSError)),
    reraise=True,
)
async def get_async_connection(dsn: Optional[str] = None) -> AsyncConnection:
    """
    Acquire an asynchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    """
    return await AsyncConnection.connect(
        dsn or build_dsn(), connect_timeout=get_settings().db_connect_timeout
    )


def get_sync_pool(min_size: int = 1, max_size: int = 10) -> ConnectionPool:
    """Get or create a synchronous connection pool via PoolManager."""
    return PoolManager().get_sync_pool(min_size=min_size, max_size=max_size)


def get_async_pool(min_size: int = 1, max_size: int = 10) -> AsyncConnectionPool:
    """Get or create an asynchronous connection pool via PoolManager."""
    return PoolManager().get_async_pool(min_size=min_size, max_size=max_size)


__all__ = [
    "PoolManager",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
    "get_async_connection",
    "get_async_pool",
]
