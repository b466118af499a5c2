"""
Schema sources: discovery of entity types for a generation run.

A schema source reports each entity's identity, its ordered (field name,
declared type) pairs and its optional table name. Field types are resolved
with ``typing.get_type_hints`` so postponed annotations work.
"""

from __future__ import annotations

import dataclasses
import importlib
import inspect
import typing
from typing import Iterable, Protocol, Sequence

from ..annotations import is_dynamo_mappable, table_name_of
from ..logging_config import get_logger
from .generator import GeneratorError
from .schema import DiscoveredType, qualified_name

logger = get_logger(__name__)


class SchemaSourceError(GeneratorError):
    """Raised when entity types cannot be discovered or introspected."""


class SchemaSource(Protocol):
    """Anything that can report the entity types of one generation run."""

    def discover(self) -> list[DiscoveredType]:
        ...


def describe_class(cls: type) -> DiscoveredType:
    """Introspect one marked dataclass into a discovered type.

    Args:
        cls: Dataclass carrying the ``@dynamo_mappable`` marker

    Returns:
        Discovered type with init fields in declaration order

    Raises:
        SchemaSourceError: If the class is not a dataclass or a field
            annotation cannot be resolved
    """
    identity = qualified_name(cls)
    if not dataclasses.is_dataclass(cls):
        raise SchemaSourceError(f"Entity {identity} is not a dataclass")

    try:
        hints = typing.get_type_hints(cls, include_extras=True)
    except Exception as e:
        raise SchemaSourceError(
            f"Cannot resolve field types of {identity}: {e}"
        ) from e

    fields = []
    for dc_field in dataclasses.fields(cls):
        if not dc_field.init:
            logger.debug("Skipping non-init field %s.%s", identity, dc_field.name)
            continue
        fields.append((dc_field.name, hints.get(dc_field.name, dc_field.type)))

    return DiscoveredType(
        identity=identity,
        python_type=cls,
        fields=tuple(fields),
        table_name=table_name_of(cls),
    )


class ClassSchemaSource:
    """Schema source over an explicit list of classes."""

    def __init__(self, classes: Iterable[type]):
        self.classes = list(classes)

    def discover(self) -> list[DiscoveredType]:
        discovered = []
        for cls in self.classes:
            if not is_dynamo_mappable(cls):
                raise SchemaSourceError(
                    f"{qualified_name(cls)} is not marked with @dynamo_mappable"
                )
            discovered.append(describe_class(cls))
        logger.info("Discovered %d entity types", len(discovered))
        return discovered


class ModuleSchemaSource:
    """Schema source that imports modules and collects the entities they define."""

    def __init__(self, module_names: Sequence[str]):
        self.module_names = list(module_names)

    def discover(self) -> list[DiscoveredType]:
        discovered = []
        for module_name in self.module_names:
            try:
                module = importlib.import_module(module_name)
            except Exception as e:
                raise SchemaSourceError(f"Cannot import module {module_name}: {e}") from e

            found = [
                member
                for _, member in vars(module).items()
                if inspect.isclass(member)
                and member.__module__ == module.__name__
                and is_dynamo_mappable(member)
            ]
            logger.debug("Module %s defines %d entity types", module_name, len(found))
            discovered.extend(describe_class(cls) for cls in found)

        logger.info(
            "Discovered %d entity types in %d modules",
            len(discovered),
            len(self.module_names),
        )
        return discovered
