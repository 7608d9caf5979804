"""
Schema descriptor: the resolved mapping configuration of one record type.

Directives are free-form key/value pairs supplied by the record type
(``schema``, ``table``, ``pk``, ``insert_skip``, ``skip_update``). Every
omitted directive falls back to a documented default.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from pgcrud.errors import (
    EmptyPrimaryKeyError,
    InvalidDirectiveError,
    UnknownDirectiveError,
    UnsupportedKeyArityError,
)
from pgcrud.mapping.naming import table_name_from_type

DEFAULT_SCHEMA = "public"
DEFAULT_PK_COLUMNS: Tuple[str, ...] = ("id",)
DEFAULT_SKIP_UPDATE: Tuple[str, ...] = ("id", "created_at")
MAX_KEY_ARITY = 2

TYPE_DIRECTIVES: Tuple[str, ...] = ("schema", "table", "pk", "insert_skip", "skip_update")


class SchemaDescriptor(BaseModel):
    """
    Resolved table identity, primary key and exclusion lists for one type.
    """

    type_name: str = Field(..., description="Name of the record type this describes.")
    schema_name: str = Field(DEFAULT_SCHEMA, description="Namespace holding the table.")
    table: str = Field(..., description="Physical table name.")
    primary_key_columns: Tuple[str, ...] = Field(
        DEFAULT_PK_COLUMNS, description="Configured PK names, in binding order."
    )
    insert_exclude: Tuple[str, ...] = Field((), description="Names never written by INSERT.")
    update_exclude: Tuple[str, ...] = Field(
        DEFAULT_SKIP_UPDATE, description="Names never written by UPDATE."
    )

    model_config = {
        "frozen": True,
    }

    @property
    def key_arity(self) -> int:
        return len(self.primary_key_columns)


def _as_name(directive: str, value: Any, type_name: str) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidDirectiveError(directive, value, "a non-empty string", type_name)
    return value


def _as_name_list(directive: str, value: Any, type_name: str) -> Tuple[str, ...]:
    # A bare string is shorthand for a one-element list.
    if isinstance(value, str):
        return (_as_name(directive, value, type_name),)
    if isinstance(value, (set, frozenset)):
        # unordered input gets a stable order
        return tuple(sorted(_as_name(directive, item, type_name) for item in value))
    if not isinstance(value, (list, tuple)):
        raise InvalidDirectiveError(
            directive, value, "a string or a collection of strings", type_name
        )
    return tuple(_as_name(directive, item, type_name) for item in value)


def resolve_descriptor(
    type_name: str, directives: Optional[Mapping[str, Any]] = None
) -> SchemaDescriptor:
    """
    Build a SchemaDescriptor from a type name and its declared directives.

    Parameters
    ----------
    type_name : str
        Name of the record type; drives the default table name.
    directives : Mapping[str, Any] | None
        Declared configuration. Recognized keys: ``schema``, ``table``,
        ``pk``, ``insert_skip``, ``skip_update``.

    Raises
    ------
    UnknownDirectiveError
        A key outside the recognized set was supplied.
    InvalidDirectiveError
        A recognized key carries a value of the wrong shape.
    EmptyPrimaryKeyError
        ``pk`` was given as an empty list.
    UnsupportedKeyArityError
        ``pk`` names more than two columns.
    """
    directives = dict(directives or {})
    for key in directives:
        if key not in TYPE_DIRECTIVES:
            raise UnknownDirectiveError(key, type_name, allowed=TYPE_DIRECTIVES)

    values: dict[str, Any] = {
        "type_name": type_name,
        "table": table_name_from_type(type_name),
    }
    if "schema" in directives:
        values["schema_name"] = _as_name("schema", directives["schema"], type_name)
    if "table" in directives:
        values["table"] = _as_name("table", directives["table"], type_name)
    if "pk" in directives:
        pk_columns = _as_name_list("pk", directives["pk"], type_name)
        if not pk_columns:
            raise EmptyPrimaryKeyError(type_name)
        if len(pk_columns) > MAX_KEY_ARITY:
            raise UnsupportedKeyArityError(pk_columns, type_name)
        values["primary_key_columns"] = pk_columns
    if "insert_skip" in directives:
        values["insert_exclude"] = _as_name_list("insert_skip", directives["insert_skip"], type_name)
    if "skip_update" in directives:
        values["update_exclude"] = _as_name_list("skip_update", directives["skip_update"], type_name)

    return SchemaDescriptor(**values)


__all__ = [
    "DEFAULT_SCHEMA",
    "DEFAULT_PK_COLUMNS",
    "DEFAULT_SKIP_UPDATE",
    "MAX_KEY_ARITY",
    "TYPE_DIRECTIVES",
    "SchemaDescriptor",
    "resolve_descriptor",
]
