"""
Primary key identity and the tagged key variants bound to point operations.

A key is either ``SingleKey(value)`` or ``KeyPair(first, second)``; binding
code matches on the variant once instead of branching per arity.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Tuple, Union

from pgcrud.errors import KeyShapeError


@dataclass(frozen=True)
class SingleKey:
    value: Any


@dataclass(frozen=True)
class KeyPair:
    first: Any
    second: Any


PrimaryKey = Union[SingleKey, KeyPair]


def key_params(key: PrimaryKey) -> Tuple[Any, ...]:
    """Values to bind for a key, in configured PK order."""
    if isinstance(key, KeyPair):
        return (key.first, key.second)
    if isinstance(key, SingleKey):
        return (key.value,)
    raise TypeError(f"expected SingleKey or KeyPair, got {type(key).__name__}")


def read_field(record: Any, field_name: str) -> Any:
    """Read a field's current value from a model instance or a mapping."""
    if isinstance(record, Mapping):
        return record[field_name]
    return getattr(record, field_name)


@dataclass(frozen=True)
class PrimaryKeyIdentity:
    """
    Resolved primary key of a record type.

    Attributes
    ----------
    fields : tuple[str, ...]
        Field names backing the key, in configured PK order.
    columns : tuple[str, ...]
        Resolved (unquoted) column names, same order.
    data_types : tuple[Any, ...]
        Declared field types, same order.
    """

    fields: Tuple[str, ...]
    columns: Tuple[str, ...]
    data_types: Tuple[Any, ...]

    @property
    def arity(self) -> int:
        return len(self.fields)

    @property
    def key_type(self) -> Any:
        if self.arity == 1:
            return self.data_types[0]
        return Tuple[self.data_types[0], self.data_types[1]]

    def coerce(self, value: Any) -> PrimaryKey:
        """
        Turn a caller-supplied key into the matching variant.

        Arity 1 wraps any value; arity 2 accepts a KeyPair or a two-item
        sequence (not a string).
        """
        if self.arity == 1:
            if isinstance(value, KeyPair):
                raise KeyShapeError(f"expected a single key value for {self.columns}, got {value!r}")
            return value if isinstance(value, SingleKey) else SingleKey(value)

        if isinstance(value, KeyPair):
            return value
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) and len(value) == 2:
            return KeyPair(value[0], value[1])
        raise KeyShapeError(f"expected a 2-item key for {self.columns}, got {value!r}")

    def key_of(self, record: Any) -> PrimaryKey:
        values = [read_field(record, name) for name in self.fields]
        if self.arity == 1:
            return SingleKey(values[0])
        return KeyPair(values[0], values[1])


__all__ = [
    "SingleKey",
    "KeyPair",
    "PrimaryKey",
    "PrimaryKeyIdentity",
    "key_params",
    "read_field",
]
