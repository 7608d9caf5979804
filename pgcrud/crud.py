"""
Primary-key point operations over a compiled mapping.

The core stops at statement text and binding order; running a statement is
delegated to an executor (see ``pgcrud.infrastructure.executors``). Values
are read from the record at call time, never at compile time.

Usage:
    from pgcrud.crud import find_by_key, insert

    insert(executor, order)
    same_order = find_by_key(executor, Order, order.id)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from pydantic import BaseModel

from pgcrud.errors import ExecError, NotFoundError
from pgcrud.mapping.compiler import CompiledMapping, CompiledStatement
from pgcrud.mapping.keys import PrimaryKey, key_params, read_field
from pgcrud.mapping.registry import get_registry
from pgcrud.utils.logging import get_logger

log = get_logger(__name__)

Target = Union[CompiledMapping, Type[BaseModel]]
CrudModelT = TypeVar("CrudModelT", bound="CrudModel")


@runtime_checkable
class Executor(Protocol):
    """
    Runs one parameterized statement.

    ``fetch`` returns the result rows keyed by column name; ``execute``
    returns the affected-row count.
    """

    def fetch(self, sql: str, params: Sequence[Any]) -> List[Mapping[str, Any]]: ...

    def execute(self, sql: str, params: Sequence[Any]) -> int: ...


@runtime_checkable
class AsyncExecutor(Protocol):
    """Awaitable twin of Executor."""

    async def fetch(self, sql: str, params: Sequence[Any]) -> List[Mapping[str, Any]]: ...

    async def execute(self, sql: str, params: Sequence[Any]) -> int: ...


def _resolve(target: Target) -> CompiledMapping:
    if isinstance(target, CompiledMapping):
        return target
    return get_registry().get(target)


def _mapping_for_record(record: Any, mapping: Optional[CompiledMapping]) -> CompiledMapping:
    if mapping is not None:
        return mapping
    if isinstance(record, BaseModel):
        return get_registry().get(type(record))
    raise TypeError(
        f"cannot infer a mapping for {type(record).__name__}; pass mapping= explicitly"
    )


@contextmanager
def _error_context(operation: str, mapping: CompiledMapping) -> Generator[None, None, None]:
    """
    Wrap executor failures into ExecError with operation context.

    ExecError raised inside the block already has context and is re-raised
    untouched.
    """
    table = mapping.statements.qualified_table
    try:
        yield
    except ExecError:
        raise
    except Exception as e:
        error_msg = f"{operation} on {table} failed: {e}"
        log.error(error_msg, extra={"operation": operation, "table": table})
        raise ExecError(error_msg, operation=operation, table=table) from e


def _record_params(statement: CompiledStatement, record: Any) -> List[Any]:
    return [read_field(record, field_name) for field_name in statement.binds]


def _one_row(
    mapping: CompiledMapping, rows: Sequence[Mapping[str, Any]], key: PrimaryKey
) -> Any:
    table = mapping.statements.qualified_table
    if not rows:
        raise NotFoundError(
            f"no row in {table} for key {key_params(key)!r}",
            operation="find_by_key",
            table=table,
        )
    if len(rows) > 1:
        log.warning(
            f"find_by_key on {table} matched {len(rows)} rows; using the first",
            extra={"table": table, "rows": len(rows)},
        )
    with _error_context("find_by_key", mapping):
        data: Dict[str, Any] = mapping.decode_row(rows[0])
        if mapping.record_type is not None:
            # rows are keyed by field name, which differs from an alias
            return mapping.record_type.model_validate(data, by_name=True)
        return data


def find_by_key(executor: Executor, target: Target, key: Any) -> Any:
    """
    Fetch the row identified by ``key``.

    Raises
    ------
    NotFoundError
        Zero rows matched.
    KeyShapeError
        ``key`` does not match the primary key's arity.
    ExecError
        The executor failed or the row could not be decoded.
    """
    mapping = _resolve(target)
    pk = mapping.primary_key.coerce(key)
    statement = mapping.statements.select_by_key
    with _error_context("find_by_key", mapping):
        rows = executor.fetch(statement.sql, key_params(pk))
    return _one_row(mapping, rows, pk)


def delete_by_key(executor: Executor, target: Target, key: Any) -> int:
    """Delete the row identified by ``key``; returns the affected count (0 is not an error)."""
    mapping = _resolve(target)
    pk = mapping.primary_key.coerce(key)
    statement = mapping.statements.delete_by_key
    with _error_context("delete_by_key", mapping):
        return executor.execute(statement.sql, key_params(pk))


def insert(executor: Executor, record: Any, mapping: Optional[CompiledMapping] = None) -> int:
    """Insert ``record``, binding its current field values in insert-plan order."""
    mapping = _mapping_for_record(record, mapping)
    statement = mapping.statements.insert
    with _error_context("insert", mapping):
        params = _record_params(statement, record)
        return executor.execute(statement.sql, params)


def update(executor: Executor, record: Any, mapping: Optional[CompiledMapping] = None) -> int:
    """Update the row of ``record``: SET values first, then the key values."""
    mapping = _mapping_for_record(record, mapping)
    statement = mapping.statements.update
    with _error_context("update", mapping):
        params = _record_params(statement, record)
        return executor.execute(statement.sql, params)


async def afind_by_key(executor: AsyncExecutor, target: Target, key: Any) -> Any:
    mapping = _resolve(target)
    pk = mapping.primary_key.coerce(key)
    statement = mapping.statements.select_by_key
    with _error_context("find_by_key", mapping):
        rows = await executor.fetch(statement.sql, key_params(pk))
    return _one_row(mapping, rows, pk)


async def adelete_by_key(executor: AsyncExecutor, target: Target, key: Any) -> int:
    mapping = _resolve(target)
    pk = mapping.primary_key.coerce(key)
    statement = mapping.statements.delete_by_key
    with _error_context("delete_by_key", mapping):
        return await executor.execute(statement.sql, key_params(pk))


async def ainsert(
    executor: AsyncExecutor, record: Any, mapping: Optional[CompiledMapping] = None
) -> int:
    mapping = _mapping_for_record(record, mapping)
    statement = mapping.statements.insert
    with _error_context("insert", mapping):
        params = _record_params(statement, record)
        return await executor.execute(statement.sql, params)


async def aupdate(
    executor: AsyncExecutor, record: Any, mapping: Optional[CompiledMapping] = None
) -> int:
    mapping = _mapping_for_record(record, mapping)
    statement = mapping.statements.update
    with _error_context("update", mapping):
        params = _record_params(statement, record)
        return await executor.execute(statement.sql, params)


class CrudModel(BaseModel):
    """
    Optional base class exposing the point operations as model methods.

    Subclasses are compiled on first use unless registered earlier with
    ``@table(...)``.
    """

    @classmethod
    def crud_mapping(cls) -> CompiledMapping:
        return get_registry().get(cls)

    def primary_key(self) -> PrimaryKey:
        return self.crud_mapping().primary_key.key_of(self)

    @classmethod
    def find_by_key(cls: Type[CrudModelT], executor: Executor, key: Any) -> CrudModelT:
        return find_by_key(executor, cls.crud_mapping(), key)

    @classmethod
    def delete_by_key(cls, executor: Executor, key: Any) -> int:
        return delete_by_key(executor, cls.crud_mapping(), key)

    def insert(self, executor: Executor) -> int:
        return insert(executor, self, self.crud_mapping())

    def update(self, executor: Executor) -> int:
        return update(executor, self, self.crud_mapping())

    @classmethod
    async def afind_by_key(cls: Type[CrudModelT], executor: AsyncExecutor, key: Any) -> CrudModelT:
        return await afind_by_key(executor, cls.crud_mapping(), key)

    @classmethod
    async def adelete_by_key(cls, executor: AsyncExecutor, key: Any) -> int:
        return await adelete_by_key(executor, cls.crud_mapping(), key)

    async def ainsert(self, executor: AsyncExecutor) -> int:
        return await ainsert(executor, self, self.crud_mapping())

    async def aupdate(self, executor: AsyncExecutor) -> int:
        return await aupdate(executor, self, self.crud_mapping())


__all__ = [
    "Executor",
    "AsyncExecutor",
    "CrudModel",
    "find_by_key",
    "delete_by_key",
    "insert",
    "update",
    "afind_by_key",
    "adelete_by_key",
    "ainsert",
    "aupdate",
]
