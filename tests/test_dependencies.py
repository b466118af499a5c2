"""Tests for generation ordering."""

import pytest

from dynamodb_codegen.core.classifier import CodecNaming
from dynamodb_codegen.core.dependencies import (
    CircularDependencyError,
    DependencyResolver,
    check_order,
)
from dynamodb_codegen.core.generator import GeneratorError
from dynamodb_codegen.core.schema import SchemaEntity

NAMING = CodecNaming("pkg")


def _entity(name: str, *depends_on: str, module: str = "app.models") -> SchemaEntity:
    python_type = type(name, (), {"__module__": module})
    return SchemaEntity(
        identity=f"{module}.{name}",
        python_type=python_type,
        codec_identity=NAMING.codec_identity(name),
        fields=(),
        dependencies=frozenset(NAMING.codec_identity(target) for target in depends_on),
    )


def _names(entities):
    return [entity.simple_name for entity in entities]


def test_chain_resolves_dependencies_first() -> None:
    entities = [_entity("A", "B"), _entity("B", "C"), _entity("C")]
    assert _names(DependencyResolver().resolve(entities)) == ["C", "B", "A"]


def test_independent_entities_are_sorted_by_identity() -> None:
    entities = [_entity("Zeta"), _entity("Alpha"), _entity("Mid")]
    assert _names(DependencyResolver().resolve(entities)) == ["Alpha", "Mid", "Zeta"]


def test_shared_dependency_comes_before_all_dependents() -> None:
    entities = [
        _entity("Route", "Waypoint", "Geometry"),
        _entity("Geometry"),
        _entity("Trip", "Waypoint"),
        _entity("Waypoint"),
    ]
    order = DependencyResolver().resolve(entities)

    assert _names(order) == ["Geometry", "Waypoint", "Route", "Trip"]
    assert check_order(order) == []


def test_two_entity_cycle_fails() -> None:
    with pytest.raises(CircularDependencyError) as excinfo:
        DependencyResolver().resolve([_entity("A", "B"), _entity("B", "A")])

    assert excinfo.value.unresolved == ("app.models.A", "app.models.B")
    assert excinfo.value.cycle == ("app.models.A", "app.models.B", "app.models.A")
    assert "Circular dependency detected among 2 entities" in str(excinfo.value)


def test_cycle_reports_only_unresolved_entities() -> None:
    entities = [_entity("Leaf"), _entity("A", "B", "Leaf"), _entity("B", "A"), _entity("Top", "A")]
    with pytest.raises(CircularDependencyError) as excinfo:
        DependencyResolver().resolve(entities)

    assert set(excinfo.value.unresolved) == {"app.models.A", "app.models.B", "app.models.Top"}


def test_self_reference_is_a_cycle() -> None:
    with pytest.raises(CircularDependencyError) as excinfo:
        DependencyResolver().resolve([_entity("Node", "Node")])
    assert excinfo.value.unresolved == ("app.models.Node",)


def test_reference_outside_the_batch_is_ignored() -> None:
    order = DependencyResolver().resolve([_entity("A", "External")])
    assert _names(order) == ["A"]


def test_empty_batch() -> None:
    assert DependencyResolver().resolve([]) == []


def test_duplicate_codec_identity_is_rejected() -> None:
    entities = [_entity("Route", module="app.a"), _entity("Route", module="app.b")]
    with pytest.raises(GeneratorError, match="would both generate"):
        DependencyResolver().resolve(entities)


def test_check_order_reports_violations() -> None:
    a, b = _entity("A", "B"), _entity("B")
    assert check_order([a, b]) == [("app.models.A", "app.models.B")]
    assert check_order([b, a]) == []
