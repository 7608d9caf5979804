"""
SQL identifier quoting for the Postgres dialect.
"""

from __future__ import annotations


def quote_identifier(name: str) -> str:
    """
    Quote a SQL identifier (schema, table or column name).

    Examples
    --------
    >>> quote_identifier("customer_name")
    '"customer_name"'
    >>> quote_identifier('odd"name')
    '"odd""name"'
    """
    escaped = name.replace('"', '""')
    return f'"{escaped}"'


def qualify_table(schema: str, table: str) -> str:
    """
    Render a schema-qualified table reference.

    >>> qualify_table("public", "orders")
    '"public"."orders"'
    """
    return f"{quote_identifier(schema)}.{quote_identifier(table)}"


__all__ = ["quote_identifier", "qualify_table"]
