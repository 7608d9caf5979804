"""
Statement compiler: turns a schema descriptor and column catalog into the
four point-operation statements and their binding plans.

Placeholders are Postgres positional parameters, 1-based and strictly
increasing left to right within one statement. Each statement carries the
field names to bind, in placeholder order.

Compilation is a pure function of its inputs and either returns a complete
StatementSet or raises a ConfigError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from pgcrud.errors import NoUpdatableColumnsError
from pgcrud.mapping.catalog import ColumnCatalog, ColumnEntry, build_catalog
from pgcrud.mapping.descriptor import SchemaDescriptor, resolve_descriptor
from pgcrud.mapping.fields import FieldSpec
from pgcrud.mapping.identifiers import qualify_table, quote_identifier
from pgcrud.mapping.keys import PrimaryKeyIdentity
from pgcrud.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class CompiledStatement:
    """SQL text plus the field names bound to ``$1..$n``, in order."""

    sql: str
    binds: Tuple[str, ...]

    @property
    def param_count(self) -> int:
        return len(self.binds)


@dataclass(frozen=True)
class StatementSet:
    qualified_table: str
    columns: Tuple[str, ...]
    pk_columns: Tuple[str, ...]
    insert_columns: Tuple[str, ...]
    select_by_key: CompiledStatement
    delete_by_key: CompiledStatement
    insert: CompiledStatement
    update: CompiledStatement


def placeholders(count: int, start: int = 1) -> str:
    """``$start, ..., $(start + count - 1)`` joined with commas."""
    return ", ".join(f"${index}" for index in range(start, start + count))


def where_pk(pk_columns: Sequence[str], start: int = 1) -> str:
    """Key predicate over quoted PK columns, numbering from ``start``."""
    return " AND ".join(
        f"{column} = ${start + offset}" for offset, column in enumerate(pk_columns)
    )


def _select_by_key(qualified: str, catalog: ColumnCatalog, pk_columns: Tuple[str, ...]) -> CompiledStatement:
    cols = ", ".join(entry.quoted for entry in catalog)
    return CompiledStatement(
        sql=f"SELECT {cols} FROM {qualified} WHERE {where_pk(pk_columns)}",
        binds=catalog.primary_key.fields,
    )


def _delete_by_key(qualified: str, catalog: ColumnCatalog, pk_columns: Tuple[str, ...]) -> CompiledStatement:
    return CompiledStatement(
        sql=f"DELETE FROM {qualified} WHERE {where_pk(pk_columns)}",
        binds=catalog.primary_key.fields,
    )


def _insert(qualified: str, entries: List[ColumnEntry]) -> CompiledStatement:
    if not entries:
        return CompiledStatement(sql=f"INSERT INTO {qualified} DEFAULT VALUES", binds=())
    cols = ", ".join(entry.quoted for entry in entries)
    return CompiledStatement(
        sql=f"INSERT INTO {qualified} ({cols}) VALUES ({placeholders(len(entries))})",
        binds=tuple(entry.field_name for entry in entries),
    )


def _update(
    qualified: str,
    entries: List[ColumnEntry],
    catalog: ColumnCatalog,
    pk_columns: Tuple[str, ...],
) -> CompiledStatement:
    set_list = ", ".join(f"{entry.quoted} = ${index}" for index, entry in enumerate(entries, start=1))
    # Key binds always follow the SET values.
    where = where_pk(pk_columns, start=len(entries) + 1)
    return CompiledStatement(
        sql=f"UPDATE {qualified} SET {set_list} WHERE {where}",
        binds=tuple(entry.field_name for entry in entries) + catalog.primary_key.fields,
    )


def compile_statements(descriptor: SchemaDescriptor, catalog: ColumnCatalog) -> StatementSet:
    """
    Produce the select/delete/insert/update statements for one record type.

    Raises
    ------
    NoUpdatableColumnsError
        Every column is excluded from UPDATE.
    """
    qualified = qualify_table(descriptor.schema_name, descriptor.table)
    pk_columns = tuple(quote_identifier(column) for column in catalog.primary_key.columns)

    insert_entries = catalog.excluding(descriptor.insert_exclude)
    update_entries = catalog.excluding(descriptor.update_exclude)
    if not update_entries:
        raise NoUpdatableColumnsError(descriptor.type_name)

    statements = StatementSet(
        qualified_table=qualified,
        columns=tuple(entry.quoted for entry in catalog),
        pk_columns=pk_columns,
        insert_columns=tuple(entry.quoted for entry in insert_entries),
        select_by_key=_select_by_key(qualified, catalog, pk_columns),
        delete_by_key=_delete_by_key(qualified, catalog, pk_columns),
        insert=_insert(qualified, insert_entries),
        update=_update(qualified, update_entries, catalog, pk_columns),
    )
    log.debug(
        "Compiled statements",
        extra={
            "type_name": descriptor.type_name,
            "select_sql": statements.select_by_key.sql,
            "delete_sql": statements.delete_by_key.sql,
            "insert_sql": statements.insert.sql,
            "update_sql": statements.update.sql,
        },
    )
    return statements


@dataclass(frozen=True)
class CompiledMapping:
    """
    Everything derived once for a record type: descriptor, catalog, key
    identity and statements. Immutable and safe to share across threads.
    """

    descriptor: SchemaDescriptor
    catalog: ColumnCatalog
    statements: StatementSet
    record_type: Optional[Type[Any]] = None

    @property
    def type_name(self) -> str:
        return self.descriptor.type_name

    @property
    def primary_key(self) -> PrimaryKeyIdentity:
        return self.catalog.primary_key

    def decode_row(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Re-key a result row from column names to field names."""
        return {entry.field_name: row[entry.column_name] for entry in self.catalog}


def compile_mapping(
    type_name: str,
    fields: Sequence[FieldSpec],
    directives: Optional[Mapping[str, Any]] = None,
    record_type: Optional[Type[Any]] = None,
) -> CompiledMapping:
    """
    Run the whole pipeline for one record type description.

    Parameters
    ----------
    type_name : str
        Record type name (drives the default table name).
    fields : Sequence[FieldSpec]
        Declared fields, in declaration order.
    directives : Mapping[str, Any] | None
        Type-level directives (``schema``, ``table``, ``pk``,
        ``insert_skip``, ``skip_update``).
    record_type : type | None
        Model class rows are decoded into, if any.

    Raises
    ------
    ConfigError
        Any configuration problem; nothing is returned in that case.
    """
    descriptor = resolve_descriptor(type_name, directives)
    catalog = build_catalog(fields, descriptor)
    statements = compile_statements(descriptor, catalog)
    return CompiledMapping(
        descriptor=descriptor,
        catalog=catalog,
        statements=statements,
        record_type=record_type,
    )


__all__ = [
    "CompiledStatement",
    "StatementSet",
    "CompiledMapping",
    "placeholders",
    "where_pk",
    "compile_statements",
    "compile_mapping",
]
