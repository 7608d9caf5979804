"""
Naming conventions used when a record type leaves its table or column names
unspecified.
"""

from __future__ import annotations

from typing import Optional


def table_name_from_type(type_name: str) -> str:
    """
    Derive the default table name for a record type.

    Every uppercase letter after the first character starts a new
    underscore-separated segment; the result is lowercased and pluralized
    with a trailing ``s`` unless it already ends in one.

    Examples
    --------
    >>> table_name_from_type("Order")
    'orders'
    >>> table_name_from_type("OrderLineItem")
    'order_line_items'
    >>> table_name_from_type("Status")
    'status'
    """
    parts = []
    for index, char in enumerate(type_name):
        if char.isupper():
            if index > 0:
                parts.append("_")
            parts.append(char.lower())
        else:
            parts.append(char)
    name = "".join(parts)
    if not name.endswith("s"):
        name += "s"
    return name


def column_name_from_field(field_name: str, rename: Optional[str] = None) -> str:
    """Resolve a field's column name: the explicit rename, else the field name."""
    return rename if rename is not None else field_name


__all__ = ["table_name_from_type", "column_name_from_field"]
