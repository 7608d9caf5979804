"""
Process-wide registry of compiled mappings, keyed by record type.

Mappings are compiled once and read many times. Registration through the
``@table(...)`` decorator happens at class-definition time, so a bad
configuration fails the import of the module declaring the model.

Usage:
    from pgcrud.mapping.registry import table

    @table(pk=("group_id", "user_id"))
    class Membership(BaseModel):
        group_id: int
        user_id: int
        joined_at: datetime
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

from pgcrud.mapping.compiler import CompiledMapping, compile_mapping
from pgcrud.mapping.fields import fields_from_model
from pgcrud.utils.logging import get_logger

log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Type[BaseModel])


def compile_model(model: Type[BaseModel], **directives: Any) -> CompiledMapping:
    """Compile a pydantic model's mapping without registering it."""
    return compile_mapping(
        model.__name__,
        fields_from_model(model),
        directives,
        record_type=model,
    )


class MappingRegistry:
    """
    Thread-safe map of record type -> CompiledMapping.

    Entries are never mutated; re-registering a type replaces its entry with
    a freshly compiled one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._mappings: Dict[type, CompiledMapping] = {}

    def register(self, model: Type[BaseModel], **directives: Any) -> CompiledMapping:
        """
        Compile and store the mapping of ``model``.

        Raises
        ------
        ConfigError
            The model's configuration is invalid; nothing is stored.
        """
        mapping = compile_model(model, **directives)
        with self._lock:
            self._mappings[model] = mapping
        log.info(
            f"Registered {model.__name__} -> {mapping.statements.qualified_table}",
            extra={"type_name": model.__name__, "table": mapping.statements.qualified_table},
        )
        return mapping

    def get(self, model: Type[BaseModel]) -> CompiledMapping:
        """
        Return the mapping of ``model``, compiling it with default
        directives on first use if it was never registered.
        """
        with self._lock:
            mapping = self._mappings.get(model)
            if mapping is None:
                mapping = compile_model(model)
                self._mappings[model] = mapping
                log.info(
                    f"Compiled {model.__name__} with default directives",
                    extra={"type_name": model.__name__},
                )
            return mapping

    def __contains__(self, model: object) -> bool:
        with self._lock:
            return model in self._mappings

    def __len__(self) -> int:
        with self._lock:
            return len(self._mappings)

    def clear(self) -> None:
        with self._lock:
            self._mappings.clear()


default_registry = MappingRegistry()


def get_registry() -> MappingRegistry:
    return default_registry


def table(
    *, registry: Optional[MappingRegistry] = None, **directives: Any
) -> Callable[[ModelT], ModelT]:
    """
    Class decorator registering a model with its type-level directives.

    Parameters
    ----------
    registry : MappingRegistry | None
        Target registry; defaults to the process-wide one.
    **directives
        ``schema``, ``table``, ``pk``, ``insert_skip``, ``skip_update``.
    """

    def decorator(model: ModelT) -> ModelT:
        (registry or default_registry).register(model, **directives)
        return model

    return decorator


__all__ = [
    "MappingRegistry",
    "default_registry",
    "get_registry",
    "compile_model",
    "table",
]
