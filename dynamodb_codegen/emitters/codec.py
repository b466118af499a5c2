"""
Codec emitter: one encode/decode class per schema entity.

Per-field code comes from the macros in ``field_mappings.py.j2``; the
strategy to macro table below must cover every ``MappingStrategy``.
"""

import decimal
import textwrap
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..core.generator import GeneratorError, TemplateEmitter
from ..core.naming import create_python_sanitizer
from ..core.schema import FieldDescriptor, MappingStrategy, SchemaEntity
from ..logging_config import get_logger

logger = get_logger(__name__)

FIELD_TEMPLATE = "field_mappings.py.j2"
CODEC_TEMPLATE = "codec.py.j2"

# Strategy -> macro stem; encode_<stem> and decode_<stem> must both exist
FIELD_MACROS: Dict[MappingStrategy, str] = {
    MappingStrategy.STRING: "string",
    MappingStrategy.NUMBER: "number",
    MappingStrategy.BOOLEAN: "boolean",
    MappingStrategy.TIMESTAMP: "timestamp",
    MappingStrategy.ENUM: "enum",
    MappingStrategy.STRING_LIST: "string_list",
    MappingStrategy.NUMBER_LIST: "number_list",
    MappingStrategy.NESTED_NUMBER_LIST: "nested_number_list",
    MappingStrategy.COMPLEX_OBJECT: "complex_object",
    MappingStrategy.COMPLEX_LIST: "complex_list",
    MappingStrategy.MAP: "map",
}

NUMBER_KINDS = {int: "int", float: "float", decimal.Decimal: "Decimal"}

# Names the codec template itself imports or defines
TEMPLATE_NAMES = {"TYPE_CHECKING", "Any", "Iterable", "Mapping", "Optional", "mu", "annotations"}


class UnsupportedMappingError(GeneratorError):
    """Raised when an entity has a field whose strategy cannot be emitted."""


class ImportCollector:
    """Collects ``from module import name`` statements without name clashes."""

    def __init__(self, reserved: Optional[set] = None):
        self._bound: Dict[str, Tuple[str, str]] = {}
        self._reserved = set(reserved or ())
        self.statements: Dict[str, Dict[str, str]] = {}

    def reference(self, module: str, qualname: str) -> str:
        """Import the top-level owner of ``qualname`` and return an expression for it."""
        top, _, rest = qualname.partition(".")
        alias = self._bind(module, top)
        return f"{alias}.{rest}" if rest else alias

    def _bind(self, module: str, name: str) -> str:
        for alias, target in self._bound.items():
            if target == (module, name):
                return alias

        alias = name
        counter = 1
        while alias in self._bound or alias in self._reserved:
            alias = f"{name}_{counter}"
            counter += 1

        self._bound[alias] = (module, name)
        self.statements.setdefault(module, {})[alias] = name
        return alias

    def reserve(self, name: str):
        self._reserved.add(name)

    def render(self) -> List[str]:
        """Import statements sorted by module and name."""
        lines = []
        for module in sorted(self.statements):
            names = [
                name if alias == name else f"{name} as {alias}"
                for alias, name in sorted(self.statements[module].items(), key=lambda kv: kv[1])
            ]
            lines.append(f"from {module} import {', '.join(names)}")
        return lines


@dataclass(frozen=True)
class DependencyParameter:
    """A constructor parameter receiving another entity's codec."""

    name: str
    codec_identity: str
    type_ref: str

    @property
    def attribute(self) -> str:
        return f"self._{self.name}"


@dataclass(frozen=True)
class FieldContext:
    """Everything a field macro needs, pre-rendered as Python expressions."""

    name: str
    key: str
    getter: str
    temp: str
    primitive: bool
    codec: str = ""
    kind: str = ""
    enum_ref: str = ""


@dataclass(frozen=True)
class FieldBlock:
    """Encode and decode statements for one field."""

    descriptor: FieldDescriptor
    encode: str
    decode: str


@dataclass
class CodecDefinition:
    """Intermediate form of one codec, consumed by the template."""

    entity: SchemaEntity
    module: str
    class_name: str
    entity_ref: str
    parameters: List[DependencyParameter] = field(default_factory=list)
    blocks: List[FieldBlock] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    type_imports: List[str] = field(default_factory=list)

    def parameter_for(self, codec_identity: str) -> DependencyParameter:
        for parameter in self.parameters:
            if parameter.codec_identity == codec_identity:
                return parameter
        raise KeyError(codec_identity)


class CodecEmitter(TemplateEmitter):
    """Builds and renders codec modules."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._check_macros()

    @property
    def artifact_kind(self) -> str:
        return "codec"

    def _check_macros(self):
        """Fail early if a strategy has no emission rule."""
        missing = [strategy.name for strategy in MappingStrategy if strategy not in FIELD_MACROS]
        if missing:
            raise GeneratorError(f"No field emission rule for: {', '.join(missing)}")

        macros = self.template_engine.get_template_module(FIELD_TEMPLATE)
        for stem in FIELD_MACROS.values():
            for direction in ("encode", "decode"):
                if not hasattr(macros, f"{direction}_{stem}"):
                    raise GeneratorError(
                        f"{FIELD_TEMPLATE} does not define {direction}_{stem}"
                    )

    def build_definition(self, entity: SchemaEntity) -> CodecDefinition:
        """
        Build the codec definition of an entity.

        Args:
            entity: Classified entity

        Returns:
            Definition with wiring parameters and per-field blocks

        Raises:
            UnsupportedMappingError: For MAP fields unless placeholders are enabled
        """
        imports = ImportCollector(TEMPLATE_NAMES | {entity.codec_class_name})
        type_imports = ImportCollector(TEMPLATE_NAMES | {entity.codec_class_name})
        entity_ref = imports.reference(entity.module, entity.python_type.__qualname__)
        type_imports.reserve(entity_ref.split(".")[0])

        # Dependency codecs in a stable order
        sanitizer = create_python_sanitizer()
        parameters = []
        for codec_identity in sorted(entity.dependencies):
            codec_module, codec_class = codec_identity.rsplit(".", 1)
            type_ref = type_imports.reference(codec_module, codec_class)
            imports.reserve(type_ref)
            parameters.append(
                DependencyParameter(
                    name=sanitizer.sanitize_name(codec_class),
                    codec_identity=codec_identity,
                    type_ref=type_ref,
                )
            )

        definition = CodecDefinition(
            entity=entity,
            module=entity.codec_module,
            class_name=entity.codec_class_name,
            entity_ref=entity_ref,
            parameters=parameters,
        )

        for descriptor in entity.fields:
            context = self._field_context(descriptor, definition, imports)
            stem = FIELD_MACROS[descriptor.strategy]
            definition.blocks.append(
                FieldBlock(
                    descriptor=descriptor,
                    encode=self._render_macro(f"encode_{stem}", context),
                    decode=self._render_macro(f"decode_{stem}", context),
                )
            )

        definition.imports = imports.render()
        definition.type_imports = type_imports.render()
        return definition

    def _field_context(
        self,
        descriptor: FieldDescriptor,
        definition: CodecDefinition,
        imports: ImportCollector,
    ) -> FieldContext:
        strategy = descriptor.strategy
        entity = definition.entity

        if strategy == MappingStrategy.MAP and self.config.map_fields != "placeholder":
            raise UnsupportedMappingError(
                f"{entity.identity}.{descriptor.name}: map fields are not supported "
                f"(set map_fields to 'placeholder' to skip them)"
            )

        codec = ""
        if descriptor.mapper_dependency:
            codec = definition.parameter_for(descriptor.mapper_dependency).attribute

        kind = ""
        if strategy in (
            MappingStrategy.NUMBER,
            MappingStrategy.NUMBER_LIST,
            MappingStrategy.NESTED_NUMBER_LIST,
        ):
            kind = NUMBER_KINDS[descriptor.value_type]
            if descriptor.value_type is decimal.Decimal:
                kind = imports.reference("decimal", "Decimal")

        enum_ref = ""
        if strategy == MappingStrategy.ENUM:
            enum_type = descriptor.value_type
            enum_ref = imports.reference(enum_type.__module__, enum_type.__qualname__)

        return FieldContext(
            name=descriptor.name,
            key=repr(descriptor.name),
            getter=f"value.{descriptor.name}",
            temp=f"{descriptor.name}_value",
            primitive=descriptor.primitive,
            codec=codec,
            kind=kind,
            enum_ref=enum_ref,
        )

    def _render_macro(self, macro_name: str, context: FieldContext) -> str:
        rendered = self.template_engine.call_macro(FIELD_TEMPLATE, macro_name, context)
        return textwrap.dedent(rendered).strip("\n")

    def emit(self, entity: SchemaEntity) -> Tuple[CodecDefinition, str]:
        """
        Render the codec module of an entity.

        Returns:
            (definition, module source)
        """
        definition = self.build_definition(entity)
        source = self.render_template(
            CODEC_TEMPLATE,
            {
                "add_comments": self.config.add_comments,
                "entity_identity": entity.identity,
                "entity_ref": definition.entity_ref,
                "class_name": definition.class_name,
                "parameters": definition.parameters,
                "blocks": definition.blocks,
                "imports": definition.imports,
                "type_imports": definition.type_imports,
            },
        )
        logger.debug(
            "Rendered %s with %d fields and %d dependencies",
            definition.class_name,
            len(definition.blocks),
            len(definition.parameters),
        )
        return definition, source
