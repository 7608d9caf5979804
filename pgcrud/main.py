from __future__ import annotations

import importlib
import json
import sys
from typing import Any, Dict

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from pgcrud.config import get_settings
from pgcrud.errors import ConfigError
from pgcrud.mapping.compiler import CompiledMapping
from pgcrud.mapping.registry import get_registry
from pgcrud.utils.logging import configure_logging

app = typer.Typer(help="pgcrud: inspect compiled primary-key CRUD statements.")


def _load_model(target: str) -> Any:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Expected MODULE:CLASS, got '{target}'")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


def mapping_payload(mapping: CompiledMapping) -> Dict[str, Any]:
    """JSON-friendly view of a compiled mapping."""
    statements = mapping.statements
    payload: Dict[str, Any] = {
        "type": mapping.type_name,
        "table": statements.qualified_table,
        "columns": list(statements.columns),
        "pk_columns": list(statements.pk_columns),
        "insert_columns": list(statements.insert_columns),
    }
    for name in ("select_by_key", "delete_by_key", "insert", "update"):
        statement = getattr(statements, name)
        payload[name] = {"sql": statement.sql, "binds": list(statement.binds)}
    return payload


def print_mapping(mapping: CompiledMapping, console: Console | None = None) -> None:
    """
    Render a compiled mapping as a rich table.
    """
    console = console or Console()
    table = Table(
        title=f"{mapping.type_name} -> {mapping.statements.qualified_table}",
        box=box.ROUNDED,
        show_lines=True,
    )
    table.add_column("Operation", style="cyan", no_wrap=True)
    table.add_column("SQL")
    table.add_column("Binds", style="green")
    for name in ("select_by_key", "delete_by_key", "insert", "update"):
        statement = getattr(mapping.statements, name)
        table.add_row(name, statement.sql, ", ".join(statement.binds) or "-")
    console.print(table)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"env={settings.app_env} log_level={settings.log_level}"
    )


@app.command()
def inspect(
    target: str = typer.Argument(..., help="Model to compile, as MODULE:CLASS."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """
    Compile a model's mapping and print its statements and binding plans.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        model = _load_model(target)
        mapping = get_registry().get(model)
    except (ConfigError, ImportError, AttributeError, ValueError, TypeError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(mapping_payload(mapping), indent=2))
    else:
        print_mapping(mapping)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
