"""
Infrastructure package for pgcrud.

Centralizes database connectivity concerns (sync/async factories, pooling)
and the executor adapters that run compiled statements. Keep this layer
focused on I/O, decoupled from the mapping compiler.
"""

from pgcrud.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_async_connection,
    get_async_pool,
    get_sync_connection,
    get_sync_pool,
)
from pgcrud.infrastructure.executors import (
    AsyncPsycopgExecutor,
    AsyncpgExecutor,
    PsycopgExecutor,
    register_json_codecs,
    rows_affected,
)

__all__ = [
    "PoolManager",
    "build_dsn",
    "get_async_connection",
    "get_async_pool",
    "get_sync_connection",
    "get_sync_pool",
    "PsycopgExecutor",
    "AsyncPsycopgExecutor",
    "AsyncpgExecutor",
    "register_json_codecs",
    "rows_affected",
]
