"""
pgcrud - declarative primary-key CRUD statements for PostgreSQL.

Describe a record type once (a pydantic model plus a few directives) and get
the exact SQL text and parameter-binding plan for its point operations:

- select by primary key
- delete by primary key
- insert
- update by primary key

Mappings are compiled once per type, cached in a registry and shared
read-only. Running the statements is delegated to an executor adapter
(psycopg or asyncpg).
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from pgcrud.config import Settings, get_settings
from pgcrud.crud import (
    AsyncExecutor,
    CrudModel,
    Executor,
    adelete_by_key,
    afind_by_key,
    ainsert,
    aupdate,
    delete_by_key,
    find_by_key,
    insert,
    update,
)
from pgcrud.errors import (
    ConfigError,
    DuplicateColumnError,
    EmptyPrimaryKeyError,
    ExecError,
    InvalidDirectiveError,
    KeyShapeError,
    NoUpdatableColumnsError,
    NotFoundError,
    PgCrudError,
    PrimaryKeyFieldNotFoundError,
    UnknownDirectiveError,
    UnsupportedKeyArityError,
)
from pgcrud.mapping import (
    CompiledMapping,
    FieldSpec,
    KeyPair,
    MappingRegistry,
    SingleKey,
    column,
    compile_mapping,
    get_registry,
    table,
)
from pgcrud.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Mapping
    "FieldSpec",
    "column",
    "table",
    "compile_mapping",
    "CompiledMapping",
    "MappingRegistry",
    "get_registry",
    "SingleKey",
    "KeyPair",
    # Operations
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
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
]
