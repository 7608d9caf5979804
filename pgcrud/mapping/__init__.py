"""
Mapping compiler package.

Turns a record type description (fields + directives) into the SQL text and
binding plans of its primary-key point operations. Pure and side-effect free;
nothing here talks to a database.
"""

from pgcrud.mapping.catalog import ColumnCatalog, ColumnEntry, build_catalog
from pgcrud.mapping.compiler import (
    CompiledMapping,
    CompiledStatement,
    StatementSet,
    compile_mapping,
    compile_statements,
)
from pgcrud.mapping.descriptor import SchemaDescriptor, resolve_descriptor
from pgcrud.mapping.fields import FieldSpec, column, fields_from_model
from pgcrud.mapping.keys import KeyPair, PrimaryKey, PrimaryKeyIdentity, SingleKey, key_params
from pgcrud.mapping.naming import column_name_from_field, table_name_from_type
from pgcrud.mapping.registry import MappingRegistry, compile_model, get_registry, table

__all__ = [
    # Naming
    "table_name_from_type",
    "column_name_from_field",
    # Descriptor
    "SchemaDescriptor",
    "resolve_descriptor",
    # Fields and catalog
    "FieldSpec",
    "column",
    "fields_from_model",
    "ColumnEntry",
    "ColumnCatalog",
    "build_catalog",
    # Keys
    "SingleKey",
    "KeyPair",
    "PrimaryKey",
    "PrimaryKeyIdentity",
    "key_params",
    # Compiler
    "CompiledStatement",
    "StatementSet",
    "CompiledMapping",
    "compile_statements",
    "compile_mapping",
    # Registry
    "MappingRegistry",
    "compile_model",
    "get_registry",
    "table",
]
