"""
Column catalog: the ordered (field, column, type) list of a record type.

Declaration order is preserved as-is; INSERT binds columns in catalog order
minus the excluded ones.

Configured names (pk entries, exclusion entries) are matched against the
catalog by resolved column name first. Only when no column carries the name
does the bare field name match. This keeps a rename that collides with
another field's original name deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple

from pgcrud.errors import DuplicateColumnError, PrimaryKeyFieldNotFoundError
from pgcrud.mapping.descriptor import SchemaDescriptor
from pgcrud.mapping.fields import FieldSpec
from pgcrud.mapping.identifiers import quote_identifier
from pgcrud.mapping.keys import PrimaryKeyIdentity
from pgcrud.mapping.naming import column_name_from_field
from pgcrud.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ColumnEntry:
    field_name: str
    column_name: str
    data_type: Any

    @property
    def quoted(self) -> str:
        return quote_identifier(self.column_name)


@dataclass(frozen=True)
class ColumnCatalog:
    """Ordered catalog entries plus the resolved primary key."""

    type_name: str
    entries: Tuple[ColumnEntry, ...]
    primary_key: PrimaryKeyIdentity

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def match(self, name: str) -> List[ColumnEntry]:
        """Entries a configured name refers to (column name wins over field name)."""
        by_column = [entry for entry in self.entries if entry.column_name == name]
        if by_column:
            return by_column
        return [entry for entry in self.entries if entry.field_name == name]

    def excluding(self, names: Iterable[str]) -> List[ColumnEntry]:
        """Entries left after removing every entry matched by ``names``, in catalog order."""
        excluded: set[str] = set()
        for name in names:
            matched = self.match(name)
            if not matched:
                log.debug("Exclusion matches no column", extra={"type_name": self.type_name, "excluded": name})
            excluded.update(entry.field_name for entry in matched)
        return [entry for entry in self.entries if entry.field_name not in excluded]


def _entries(fields: Sequence[FieldSpec], type_name: str) -> Tuple[ColumnEntry, ...]:
    entries = tuple(
        ColumnEntry(
            field_name=spec.name,
            column_name=column_name_from_field(spec.name, spec.rename),
            data_type=spec.data_type,
        )
        for spec in fields
    )
    seen: dict[str, List[str]] = {}
    for entry in entries:
        seen.setdefault(entry.column_name, []).append(entry.field_name)
    for column, owners in seen.items():
        if len(owners) > 1:
            raise DuplicateColumnError(column, owners, type_name)
    return entries


def _resolve_primary_key(
    entries: Tuple[ColumnEntry, ...], descriptor: SchemaDescriptor
) -> PrimaryKeyIdentity:
    found: List[ColumnEntry] = []
    for requested in descriptor.primary_key_columns:
        entry = next((e for e in entries if e.column_name == requested), None)
        if entry is None:
            entry = next((e for e in entries if e.field_name == requested), None)
        if entry is None:
            raise PrimaryKeyFieldNotFoundError(requested, descriptor.type_name)
        found.append(entry)
    return PrimaryKeyIdentity(
        fields=tuple(e.field_name for e in found),
        columns=tuple(e.column_name for e in found),
        data_types=tuple(e.data_type for e in found),
    )


def build_catalog(fields: Sequence[FieldSpec], descriptor: SchemaDescriptor) -> ColumnCatalog:
    """
    Resolve every field's column and the primary key of one record type.

    Raises
    ------
    DuplicateColumnError
        Two fields resolve to the same column name.
    PrimaryKeyFieldNotFoundError
        A configured pk name matches neither a column nor a field.
    """
    entries = _entries(fields, descriptor.type_name)
    return ColumnCatalog(
        type_name=descriptor.type_name,
        entries=entries,
        primary_key=_resolve_primary_key(entries, descriptor),
    )


__all__ = ["ColumnEntry", "ColumnCatalog", "build_catalog"]
