"""
Core schema representation for codec generation.

Discovered entity types are normalized into immutable ``SchemaEntity``
objects that the resolver and emitters work with consistently.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple, get_origin
from enum import Enum


class MappingStrategy(Enum):
    """How a field's declared type maps to and from an attribute value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ENUM = "enum"
    STRING_LIST = "string_list"
    NUMBER_LIST = "number_list"
    NESTED_NUMBER_LIST = "nested_number_list"
    COMPLEX_OBJECT = "complex_object"
    COMPLEX_LIST = "complex_list"
    MAP = "map"  # Unsupported placeholder

    @property
    def needs_codec(self) -> bool:
        """Whether fields of this strategy delegate to another entity's codec."""
        return self in (MappingStrategy.COMPLEX_OBJECT, MappingStrategy.COMPLEX_LIST)


@dataclass(frozen=True)
class DiscoveredType:
    """An entity type as reported by a schema source."""

    identity: str
    python_type: type
    fields: Tuple[Tuple[str, Any], ...]
    table_name: Optional[str] = None  # None when not a stored table

    @property
    def simple_name(self) -> str:
        return self.python_type.__name__

    @property
    def is_table(self) -> bool:
        return self.table_name is not None


@dataclass(frozen=True)
class FieldDescriptor:
    """A classified entity field."""

    name: str
    declared_type: Any
    strategy: MappingStrategy
    primitive: bool = False

    # Codec identity of the referenced entity (complex strategies only)
    mapper_dependency: Optional[str] = None

    # Unwrapped scalar type: enum class, number kind or element entity
    value_type: Any = None

    def __post_init__(self):
        if self.strategy.needs_codec != (self.mapper_dependency is not None):
            raise ValueError(
                f"Field {self.name}: mapper_dependency must be set exactly for "
                f"complex strategies, got {self.strategy.name} "
                f"with {self.mapper_dependency!r}"
            )

    @property
    def type_name(self) -> str:
        """Readable rendering of the declared type."""
        return describe_type(self.declared_type)


@dataclass(frozen=True)
class SchemaEntity:
    """A fully classified entity ready for ordering and emission."""

    identity: str
    python_type: type
    codec_identity: str
    fields: Tuple[FieldDescriptor, ...] = ()
    dependencies: FrozenSet[str] = field(default_factory=frozenset)
    table_name: str = ""
    is_table: bool = False

    @property
    def simple_name(self) -> str:
        return self.python_type.__name__

    @property
    def module(self) -> str:
        return self.python_type.__module__

    @property
    def codec_module(self) -> str:
        return self.codec_identity.rsplit(".", 1)[0]

    @property
    def codec_class_name(self) -> str:
        return self.codec_identity.rsplit(".", 1)[1]

    def get_field(self, name: str) -> Optional[FieldDescriptor]:
        """Get field by name."""
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None


def qualified_name(python_type: type) -> str:
    """Return the identity used for a Python type (module plus qualname)."""
    return f"{python_type.__module__}.{python_type.__qualname__}"


def describe_type(declared_type: Any) -> str:
    """Render a declared type for diagnostics."""
    if isinstance(declared_type, type) and get_origin(declared_type) is None:
        if declared_type.__module__ == "builtins":
            return declared_type.__qualname__
        return qualified_name(declared_type)
    return repr(declared_type).replace("typing.", "")
