"""Tests for the entity decorators and schema discovery."""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

import pytest

from dynamodb_codegen import dynamo_mappable, generate_codecs, table
from dynamodb_codegen.annotations import is_dynamo_mappable, table_name_of
from dynamodb_codegen.core.source import (
    ClassSchemaSource,
    ModuleSchemaSource,
    SchemaSourceError,
    describe_class,
)
from dynamodb_codegen.core.writer import InMemoryCodeWriter


def test_table_name_forms() -> None:
    @table
    @dataclass
    class Bare:
        pass

    @table()
    @dataclass
    class Called:
        pass

    @table("custom_name")
    @dataclass
    class Positional:
        pass

    @table(name="")
    @dataclass
    class EmptyName:
        pass

    assert table_name_of(Bare) == "bare"
    assert table_name_of(Called) == "called"
    assert table_name_of(Positional) == "custom_name"
    assert table_name_of(EmptyName) == "emptyname"
    assert all(is_dynamo_mappable(cls) for cls in (Bare, Called, Positional, EmptyName))


def test_marker_is_not_inherited() -> None:
    @dynamo_mappable
    @dataclass
    class Base:
        id: Optional[str] = None

    @dataclass
    class Derived(Base):
        extra: Optional[str] = None

    assert is_dynamo_mappable(Base)
    assert not is_dynamo_mappable(Derived)
    assert table_name_of(Base) is None


def test_decorators_require_a_dataclass() -> None:
    with pytest.raises(TypeError, match="must be a dataclass"):

        @dynamo_mappable
        class NotADataclass:
            pass


def test_describe_class_skips_non_init_fields_and_classvars() -> None:
    @dynamo_mappable
    @dataclass
    class Record:
        VERSION: ClassVar[int] = 2
        key: str
        cached: Optional[str] = field(default=None, init=False)
        note: Optional[str] = None

    discovered = describe_class(Record)

    assert [name for name, _ in discovered.fields] == ["key", "note"]
    assert discovered.fields[1][1] == Optional[str]
    assert discovered.table_name is None
    assert not discovered.is_table


def test_describe_class_reports_unresolvable_annotations() -> None:
    @dynamo_mappable
    @dataclass
    class Broken:
        ref: "MissingType" = None  # noqa: F821

    with pytest.raises(SchemaSourceError, match="Cannot resolve field types"):
        describe_class(Broken)


def test_module_source_finds_entities_in_definition_order() -> None:
    discovered = ModuleSchemaSource(["fixtures.routes"]).discover()

    assert [item.simple_name for item in discovered] == [
        "Waypoint",
        "RouteGeometry",
        "RouteMetadata",
        "RouteInstruction",
        "Route",
        "UserProfile",
    ]
    route = discovered[4]
    assert route.identity == "fixtures.routes.Route"
    assert route.table_name == "routes"


def test_module_source_resolves_forward_references() -> None:
    parent, child = ModuleSchemaSource(["fixtures.cyclic"]).discover()

    assert parent.identity == "fixtures.cyclic.Parent"
    assert dict(parent.fields)["child"] == Optional[child.python_type]


def test_module_source_unknown_module() -> None:
    with pytest.raises(SchemaSourceError, match="Cannot import module"):
        ModuleSchemaSource(["fixtures.does_not_exist"]).discover()


def test_module_source_wraps_errors_raised_during_import() -> None:
    with pytest.raises(SchemaSourceError, match="Cannot import module fixtures.misdecorated") as excinfo:
        ModuleSchemaSource(["fixtures.misdecorated"]).discover()

    assert "must be a dataclass" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, TypeError)


def test_generate_codecs_reports_module_import_errors() -> None:
    result = generate_codecs(["fixtures.misdecorated"], writer=InMemoryCodeWriter())

    assert not result.success
    assert "Cannot import module fixtures.misdecorated" in result.error_message
    assert isinstance(result.exception, SchemaSourceError)


def test_class_source_rejects_unmarked_classes() -> None:
    @dataclass
    class Plain:
        pass

    with pytest.raises(SchemaSourceError, match="not marked"):
        ClassSchemaSource([Plain]).discover()
