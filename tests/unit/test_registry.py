from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest
from pydantic import BaseModel

from pgcrud.errors import NoUpdatableColumnsError, UnknownDirectiveError
from pgcrud.mapping.registry import MappingRegistry, compile_model, get_registry, table

THREADS = 8


def test_table_decorator_registers_at_class_definition(registry: MappingRegistry) -> None:
    @table(registry=registry, pk=("group_id", "user_id"))
    class Membership(BaseModel):
        group_id: int
        user_id: int
        joined_at: datetime

    assert Membership in registry
    mapping = registry.get(Membership)
    assert mapping.record_type is Membership
    assert mapping.statements.qualified_table == '"public"."memberships"'
    assert mapping.primary_key.fields == ("group_id", "user_id")


def test_table_decorator_defaults_to_process_registry() -> None:
    @table(schema="billing")
    class Invoice(BaseModel):
        id: int
        amount: int

    assert Invoice in get_registry()
    assert get_registry().get(Invoice).statements.qualified_table == '"billing"."invoices"'


def test_configuration_errors_surface_at_class_definition(registry: MappingRegistry) -> None:
    with pytest.raises(NoUpdatableColumnsError):

        @table(registry=registry, skip_update=["id", "created_at"])
        class Event(BaseModel):
            id: int
            created_at: datetime

    assert len(registry) == 0


def test_unknown_directive_fails_registration(registry: MappingRegistry) -> None:
    class Widget(BaseModel):
        id: int
        label: str

    with pytest.raises(UnknownDirectiveError):
        registry.register(Widget, tablename="widgets")
    assert Widget not in registry


def test_get_compiles_unregistered_models_once(registry: MappingRegistry) -> None:
    class Order(BaseModel):
        id: int
        customer_name: str
        status: str
        created_at: datetime

    first = registry.get(Order)
    second = registry.get(Order)

    assert first is second
    assert first.statements.update.sql == (
        'UPDATE "public"."orders" SET "customer_name" = $1, "status" = $2 WHERE "id" = $3'
    )


def test_concurrent_first_use_yields_one_mapping(registry: MappingRegistry) -> None:
    class Sample(BaseModel):
        id: int
        value: str

    with ThreadPoolExecutor(max_workers=THREADS) as pool:
        mappings = list(pool.map(lambda _: registry.get(Sample), range(THREADS * 4)))

    assert all(mapping is mappings[0] for mapping in mappings)


def test_reregistering_replaces_with_identical_statements(registry: MappingRegistry) -> None:
    class Sample(BaseModel):
        id: int
        value: str

    first = registry.register(Sample)
    second = registry.register(Sample)

    assert first is not second
    assert first.statements == second.statements


def test_compile_model_does_not_register(registry: MappingRegistry) -> None:
    class Sample(BaseModel):
        id: int
        value: str

    mapping = compile_model(Sample, table="samples_v2")

    assert mapping.statements.qualified_table == '"public"."samples_v2"'
    assert Sample not in registry
    assert Sample not in get_registry()


def test_clear_empties_registry(registry: MappingRegistry) -> None:
    class Sample(BaseModel):
        id: int
        value: str

    registry.register(Sample)
    registry.clear()

    assert len(registry) == 0
