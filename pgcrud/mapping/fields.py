"""
Field declaration surface.

Record types are pydantic models. Per-field mapping directives ride along in
``Annotated`` metadata::

    class User(BaseModel):
        id: int
        full_name: Annotated[str, column(rename="name")]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Type

from pydantic import BaseModel

from pgcrud.errors import InvalidDirectiveError, UnknownDirectiveError

FIELD_DIRECTIVES: Tuple[str, ...] = ("rename",)


@dataclass(frozen=True)
class FieldSpec:
    """One declared field of a record type."""

    name: str
    data_type: Any = Any
    rename: Optional[str] = None


@dataclass(frozen=True)
class ColumnDirectives:
    """Marker carrying the per-field directives inside ``Annotated``."""

    rename: Optional[str] = None


def column(**directives: Any) -> ColumnDirectives:
    """
    Declare per-field mapping directives.

    Raises
    ------
    UnknownDirectiveError
        For any key other than ``rename``.
    InvalidDirectiveError
        If ``rename`` is not a non-empty string.
    """
    for key in directives:
        if key not in FIELD_DIRECTIVES:
            raise UnknownDirectiveError(key, allowed=FIELD_DIRECTIVES)
    rename = directives.get("rename")
    if rename is not None and (not isinstance(rename, str) or not rename):
        raise InvalidDirectiveError("rename", rename, "a non-empty string")
    return ColumnDirectives(rename=rename)


def fields_from_model(model: Type[BaseModel]) -> List[FieldSpec]:
    """
    Read a pydantic model's fields, in declaration order.
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise TypeError(f"expected a pydantic model class, got {model!r}")

    specs: List[FieldSpec] = []
    for name, info in model.model_fields.items():
        rename: Optional[str] = None
        for item in info.metadata:
            if isinstance(item, ColumnDirectives) and item.rename is not None:
                rename = item.rename
        specs.append(FieldSpec(name=name, data_type=info.annotation, rename=rename))
    return specs


__all__ = [
    "FIELD_DIRECTIVES",
    "FieldSpec",
    "ColumnDirectives",
    "column",
    "fields_from_model",
]
