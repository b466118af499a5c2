"""
Type classification: declared Python types to mapping strategies.

The classifier looks at one declared field type at a time. The only thing it
knows about other entities is whether a type carries the entity marker, and
how to name that entity's codec.
"""

import collections.abc
import datetime
import decimal
import enum
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from ..annotations import is_dynamo_mappable
from ..logging_config import get_logger
from .config import GeneratorConfig
from .generator import GeneratorError
from .naming import module_basename
from .schema import (
    DiscoveredType,
    FieldDescriptor,
    MappingStrategy,
    SchemaEntity,
    describe_type,
)

logger = get_logger(__name__)

NUMBER_TYPES = (int, float, decimal.Decimal)
TIMESTAMP_TYPES = (datetime.datetime,)
SEQUENCE_ORIGINS = (
    list,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)
MAPPING_ORIGINS = (
    dict,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


class ClassificationError(GeneratorError):
    """Raised when a declared type matches no mapping rule."""


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one declared type."""

    strategy: MappingStrategy
    dependency: Optional[str] = None
    primitive: bool = False
    value_type: Any = None
    warning: Optional[str] = None


class CodecNaming:
    """Derives codec identities for entity types."""

    def __init__(self, package_name: str = "generated_codecs", suffix: str = "Codec"):
        self.package_name = package_name
        self.suffix = suffix

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "CodecNaming":
        return cls(config.package_name, config.codec_suffix)

    def class_name(self, type_name: str) -> str:
        return f"{type_name}{self.suffix}"

    def codec_identity(self, type_name: str) -> str:
        """Return ``package.<snake>_codec.<Name>Codec`` for a simple type name."""
        stem = module_basename(type_name)
        return (
            f"{self.package_name}.{stem}_{self.suffix.lower()}"
            f".{self.class_name(type_name)}"
        )


def unwrap_optional(declared_type: Any) -> Tuple[Any, bool]:
    """
    Strip ``Annotated`` and a single ``Optional`` layer.

    Returns:
        (inner type, whether the type admitted None)
    """
    declared_type = _strip_annotated(declared_type)
    origin = typing.get_origin(declared_type)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(declared_type) if arg is not type(None)]
        if len(args) == 1:
            return _strip_annotated(args[0]), True
    return declared_type, False


def _strip_annotated(declared_type: Any) -> Any:
    if typing.get_origin(declared_type) is typing.Annotated:
        return typing.get_args(declared_type)[0]
    return declared_type


def _is_number(tp: Any) -> bool:
    return any(tp is number_type for number_type in NUMBER_TYPES)


def _is_enum(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, enum.Enum)


def _sequence_element(tp: Any) -> Tuple[bool, Any]:
    """Return (is homogeneous sequence, element type or None)."""
    origin = typing.get_origin(tp)
    if origin is None:
        if tp is list:
            return True, None
        return False, None
    if origin not in SEQUENCE_ORIGINS:
        return False, None
    args = typing.get_args(tp)
    if len(args) != 1:
        return True, None
    element, _ = unwrap_optional(args[0])
    return True, element


def _is_mapping(tp: Any) -> bool:
    if tp is dict:
        return True
    return typing.get_origin(tp) in MAPPING_ORIGINS


class TypeClassifier:
    """
    Decides the mapping strategy of a declared field type.

    Rules are tried in a fixed order and the first match wins: strings,
    numbers, booleans, timestamps, enums, sequences, mappings, entities.
    """

    def __init__(
        self,
        naming: Optional[CodecNaming] = None,
        strict: bool = True,
        is_entity: Callable[[Any], bool] = is_dynamo_mappable,
    ):
        """
        Initialize classifier.

        Args:
            naming: Codec identity naming scheme
            strict: Fail on unsupported types instead of falling back
            is_entity: Predicate telling whether a type is a schema entity
        """
        self.naming = naming or CodecNaming()
        self.strict = strict
        self.is_entity = is_entity

    def classify(self, declared_type: Any, context: str = "") -> Classification:
        """
        Classify one declared type.

        Args:
            declared_type: Annotation of the field
            context: ``Entity.field`` label used in diagnostics

        Returns:
            Classification with strategy, dependency and primitiveness

        Raises:
            ClassificationError: In strict mode, when no rule matches
        """
        tp, nullable = unwrap_optional(declared_type)

        if tp is str:
            return Classification(MappingStrategy.STRING)
        if _is_number(tp):
            return Classification(
                MappingStrategy.NUMBER, primitive=not nullable, value_type=tp
            )
        if tp is bool:
            return Classification(MappingStrategy.BOOLEAN, primitive=not nullable)
        if tp in TIMESTAMP_TYPES:
            return Classification(MappingStrategy.TIMESTAMP, value_type=tp)
        if _is_enum(tp):
            return Classification(MappingStrategy.ENUM, value_type=tp)

        is_sequence, element = _sequence_element(tp)
        if is_sequence:
            return self._classify_sequence(declared_type, element, context)

        if _is_mapping(tp):
            return Classification(MappingStrategy.MAP)

        if self.is_entity(tp):
            return Classification(
                MappingStrategy.COMPLEX_OBJECT,
                dependency=self.naming.codec_identity(tp.__name__),
                value_type=tp,
            )

        return self._unsupported(declared_type, context, "no mapping rule matches")

    def _classify_sequence(
        self, declared_type: Any, element: Any, context: str
    ) -> Classification:
        if element is str:
            return Classification(MappingStrategy.STRING_LIST)

        is_nested, inner = _sequence_element(element) if element is not None else (False, None)
        if is_nested and _is_number(inner):
            return Classification(MappingStrategy.NESTED_NUMBER_LIST, value_type=inner)

        if _is_number(element):
            return Classification(MappingStrategy.NUMBER_LIST, value_type=element)

        if element is not None and self.is_entity(element):
            return Classification(
                MappingStrategy.COMPLEX_LIST,
                dependency=self.naming.codec_identity(element.__name__),
                value_type=element,
            )

        return self._unsupported(
            declared_type, context, "unsupported list element type"
        )

    def _unsupported(self, declared_type: Any, context: str, reason: str) -> Classification:
        type_name = describe_type(declared_type)
        message = f"{context or type_name}: {reason} for {type_name}"
        if self.strict:
            raise ClassificationError(message)

        # Lenient mode keeps the nested-object fallback; the referenced codec
        # will not exist unless supplied outside this run.
        inner, _ = unwrap_optional(declared_type)
        fallback_name = getattr(inner, "__name__", None) or "Unknown"
        dependency = self.naming.codec_identity(fallback_name)
        warning = f"{message}; falling back to COMPLEX_OBJECT via {dependency}"
        logger.warning("%s", warning)
        return Classification(
            MappingStrategy.COMPLEX_OBJECT,
            dependency=dependency,
            value_type=declared_type,
            warning=warning,
        )


class SchemaAnalyzer:
    """Turns discovered types into classified schema entities."""

    def __init__(self, classifier: TypeClassifier, naming: Optional[CodecNaming] = None):
        self.classifier = classifier
        self.naming = naming or classifier.naming
        self.warnings: List[str] = []

    def analyze(self, discovered: DiscoveredType) -> SchemaEntity:
        """
        Classify every field of one entity.

        Raises:
            ClassificationError: If a field cannot be classified in strict mode
        """
        descriptors = []
        dependencies = set()

        for name, declared_type in discovered.fields:
            context = f"{discovered.identity}.{name}"
            result = self.classifier.classify(declared_type, context)
            if result.warning:
                self.warnings.append(result.warning)
            if result.dependency:
                dependencies.add(result.dependency)

            logger.debug(
                "Classified %s (%s) as %s%s",
                context,
                describe_type(declared_type),
                result.strategy.name,
                f" -> {result.dependency}" if result.dependency else "",
            )
            descriptors.append(
                FieldDescriptor(
                    name=name,
                    declared_type=declared_type,
                    strategy=result.strategy,
                    primitive=result.primitive,
                    mapper_dependency=result.dependency,
                    value_type=result.value_type,
                )
            )

        return SchemaEntity(
            identity=discovered.identity,
            python_type=discovered.python_type,
            codec_identity=self.naming.codec_identity(discovered.simple_name),
            fields=tuple(descriptors),
            dependencies=frozenset(dependencies),
            table_name=discovered.table_name or discovered.simple_name.lower(),
            is_table=discovered.is_table,
        )


def classify_entity_type(cls: type, config: Optional[GeneratorConfig] = None) -> SchemaEntity:
    """Convenience: discover and classify a single entity class."""
    from .source import describe_class

    config = config or GeneratorConfig()
    naming = CodecNaming.from_config(config)
    classifier = TypeClassifier(naming, strict=config.strict_classification)
    return SchemaAnalyzer(classifier).analyze(describe_class(cls))
