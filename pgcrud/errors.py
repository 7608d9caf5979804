"""
Error taxonomy for pgcrud.

Two families:
- ConfigError: raised while compiling a record type's mapping. Fatal for that
  type and never retried; no partial statement set is ever produced.
- ExecError: raised by the CRUD operations at runtime. Wraps the underlying
  executor failure (available as ``__cause__``) or signals a missing row.
"""

from __future__ import annotations

from typing import Optional, Sequence


class PgCrudError(Exception):
    """Root of every error raised by this package."""


class ConfigError(PgCrudError):
    """Base exception for mapping configuration failures."""

    def __init__(self, message: str, type_name: Optional[str] = None):
        self.type_name = type_name
        if type_name:
            message = f"{type_name}: {message}"
        super().__init__(message)


class UnknownDirectiveError(ConfigError):
    """A directive key outside the recognized set was supplied."""

    def __init__(self, directive: str, type_name: Optional[str] = None, allowed: Sequence[str] = ()):
        self.directive = directive
        hint = f" Expected one of: {', '.join(allowed)}." if allowed else ""
        super().__init__(f"unknown directive '{directive}'.{hint}", type_name)


class InvalidDirectiveError(ConfigError):
    """A recognized directive carries a value of the wrong shape."""

    def __init__(self, directive: str, value: object, expected: str, type_name: Optional[str] = None):
        self.directive = directive
        self.value = value
        super().__init__(f"directive '{directive}' expects {expected}, got {value!r}", type_name)


class EmptyPrimaryKeyError(ConfigError):
    def __init__(self, type_name: Optional[str] = None):
        super().__init__("pk cannot be empty", type_name)


class UnsupportedKeyArityError(ConfigError):
    """More than two primary-key columns were configured."""

    def __init__(self, columns: Sequence[str], type_name: Optional[str] = None):
        self.columns = tuple(columns)
        super().__init__(
            f"only 1-2 PK columns are supported, got {len(self.columns)}: {list(self.columns)}",
            type_name,
        )


class PrimaryKeyFieldNotFoundError(ConfigError):
    def __init__(self, requested_name: str, type_name: Optional[str] = None):
        self.requested_name = requested_name
        super().__init__(f"pk field '{requested_name}' not found", type_name)


class NoUpdatableColumnsError(ConfigError):
    def __init__(self, type_name: Optional[str] = None):
        super().__init__("no fields to UPDATE (all are in skip_update)", type_name)


class DuplicateColumnError(ConfigError):
    """Two fields resolve to the same column name."""

    def __init__(self, column: str, fields: Sequence[str], type_name: Optional[str] = None):
        self.column = column
        self.fields = tuple(fields)
        super().__init__(
            f"column '{column}' is declared by more than one field: {list(self.fields)}",
            type_name,
        )


class ExecError(PgCrudError):
    """Runtime failure of a CRUD operation."""

    def __init__(self, message: str, operation: Optional[str] = None, table: Optional[str] = None):
        self.operation = operation
        self.table = table
        super().__init__(message)


class NotFoundError(ExecError):
    """A point lookup matched zero rows."""


class KeyShapeError(ExecError):
    """A key value does not match the primary key's arity."""


__all__ = [
    "PgCrudError",
    "ConfigError",
    "UnknownDirectiveError",
    "InvalidDirectiveError",
    "EmptyPrimaryKeyError",
    "UnsupportedKeyArityError",
    "PrimaryKeyFieldNotFoundError",
    "NoUpdatableColumnsError",
    "DuplicateColumnError",
    "ExecError",
    "NotFoundError",
    "KeyShapeError",
]
