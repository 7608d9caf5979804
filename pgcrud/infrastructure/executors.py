"""
Executor adapters binding compiled statements to real Postgres drivers.

All compiled statements use native ``$n`` placeholders:
- psycopg runs them through raw cursors (server-side binding, no ``%s``
  rewriting).
- asyncpg understands them natively.

Structured values (mappings, pydantic models, and lists holding either) are
bound as JSON:
- psycopg wraps them in ``Jsonb``.
- asyncpg relies on the codecs installed by :func:`register_json_codecs`
  (pass it as ``init=`` when creating an asyncpg pool).

Lists of scalars are left alone so psycopg/asyncpg bind them as arrays.

Adapters do not manage transactions: callers commit or run in autocommit.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence, Union

import asyncpg
import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from pydantic import BaseModel, TypeAdapter

_JSON_VALUE = TypeAdapter(Any)


def rows_affected(status: str) -> int:
    """
    Extract the affected-row count from a Postgres command tag.

    >>> rows_affected("UPDATE 3")
    3
    >>> rows_affected("INSERT 0 1")
    1
    """
    tail = status.rsplit(" ", 1)[-1] if status else ""
    return int(tail) if tail.isdigit() else 0


def is_json_value(value: Any) -> bool:
    """True for values that map onto a json/jsonb column rather than a scalar or array."""
    if isinstance(value, (BaseModel, Mapping)):
        return True
    if isinstance(value, (list, tuple)):
        return any(isinstance(item, (BaseModel, Mapping)) for item in value)
    return False


def to_json_python(value: Any) -> Any:
    """Plain dict/list form of a structured value (models dumped in JSON mode)."""
    return _JSON_VALUE.dump_python(value, mode="json")


def psycopg_params(params: Sequence[Any]) -> List[Any]:
    return [Jsonb(to_json_python(value)) if is_json_value(value) else value for value in params]


def asyncpg_params(params: Sequence[Any]) -> List[Any]:
    return [to_json_python(value) if is_json_value(value) else value for value in params]


async def register_json_codecs(conn: asyncpg.Connection) -> None:
    """
    Install text codecs so asyncpg encodes/decodes json and jsonb as Python objects.
    """
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class PsycopgExecutor:
    """Synchronous executor over a psycopg 3 connection."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    def fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        with psycopg.RawCursor(self._conn, row_factory=dict_row) as cur:
            cur.execute(sql, psycopg_params(params))
            return cur.fetchall()

    def execute(self, sql: str, params: Sequence[Any]) -> int:
        with psycopg.RawCursor(self._conn) as cur:
            cur.execute(sql, psycopg_params(params))
            return max(cur.rowcount, 0)


class AsyncPsycopgExecutor:
    """Asynchronous executor over a psycopg 3 async connection."""

    def __init__(self, conn: psycopg.AsyncConnection) -> None:
        self._conn = conn

    async def fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        async with psycopg.AsyncRawCursor(self._conn, row_factory=dict_row) as cur:
            await cur.execute(sql, psycopg_params(params))
            return await cur.fetchall()

    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        async with psycopg.AsyncRawCursor(self._conn) as cur:
            await cur.execute(sql, psycopg_params(params))
            return max(cur.rowcount, 0)


class AsyncpgExecutor:
    """
    Asynchronous executor over an asyncpg connection or pool.

    Note: asyncpg is kept alongside psycopg because it binds ``$n``
    parameters natively over its binary protocol; both expose the same
    executor contract. The connection (or every pooled connection) needs
    :func:`register_json_codecs` for json/jsonb columns.
    """

    def __init__(self, conn: Union[asyncpg.Connection, asyncpg.Pool]) -> None:
        self._conn = conn

    async def fetch(self, sql: str, params: Sequence[Any]) -> List[Dict[str, Any]]:
        records = await self._conn.fetch(sql, *asyncpg_params(params))
        return [dict(record) for record in records]

    async def execute(self, sql: str, params: Sequence[Any]) -> int:
        status = await self._conn.execute(sql, *asyncpg_params(params))
        return rows_affected(status)


__all__ = [
    "PsycopgExecutor",
    "AsyncPsycopgExecutor",
    "AsyncpgExecutor",
    "asyncpg_params",
    "is_json_value",
    "psycopg_params",
    "register_json_codecs",
    "rows_affected",
    "to_json_python",
]
