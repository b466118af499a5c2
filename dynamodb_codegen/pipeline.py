"""
Generation pipeline: discovery, classification, ordering and emission.

One ``run`` is a single-threaded batch. Failures of one entity are logged,
recorded and skipped; a dependency cycle aborts the whole run because no
valid order exists.
"""

from __future__ import annotations

from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union

from .core.classifier import CodecNaming, SchemaAnalyzer, TypeClassifier
from .core.config import ConfigError, GeneratorConfig, load_config
from .core.dependencies import DependencyResolver
from .core.generator import TEMPLATE_DIRECTORY, GenerationResult, GeneratorError
from .core.schema import DiscoveredType, SchemaEntity
from .core.source import ClassSchemaSource, ModuleSchemaSource, SchemaSource
from .core.templates import TemplateError, create_template_engine
from .core.writer import CodeWriter, FileCodeWriter, InMemoryCodeWriter
from .emitters.codec import CodecDefinition, CodecEmitter
from .emitters.constants import FieldConstantsEmitter
from .emitters.table_names import TableNameRegistryEmitter
from .emitters.wiring import WiringEmitter
from .logging_config import get_logger

logger = get_logger(__name__)

# Errors that abort one entity but not the run
ENTITY_ERRORS = (GeneratorError, TemplateError)


class CodecGenerationPipeline:
    """Drives one generation run against a schema source and a code writer."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        writer: Optional[CodeWriter] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Generation settings (defaults when omitted)
            writer: Destination of rendered modules; files below
                ``config.output_dir`` when omitted, in memory otherwise
        """
        self.config = config or GeneratorConfig()
        if writer is None:
            if self.config.output_dir:
                writer = FileCodeWriter(self.config.output_dir)
            else:
                writer = InMemoryCodeWriter()
        self.writer = writer

        self.naming = CodecNaming.from_config(self.config)
        self.classifier = TypeClassifier(
            self.naming, strict=self.config.strict_classification
        )
        self.resolver = DependencyResolver()

        engine = create_template_engine(TEMPLATE_DIRECTORY)
        self.codec_emitter = CodecEmitter(self.config, engine)
        self.fields_emitter = FieldConstantsEmitter(self.config, engine)
        self.registry_emitter = TableNameRegistryEmitter(self.config, engine)
        self.wiring_emitter = WiringEmitter(self.config, engine)

    def analyze(
        self, discovered_types: Sequence[DiscoveredType], result: GenerationResult
    ) -> list[SchemaEntity]:
        """Classify discovered entities; classification failures are per entity."""
        analyzer = SchemaAnalyzer(self.classifier, self.naming)
        entities = []
        for discovered in discovered_types:
            try:
                entities.append(analyzer.analyze(discovered))
            except GeneratorError as e:
                logger.error("Cannot classify %s: %s", discovered.identity, e)
                result.failures[discovered.identity] = str(e)
        result.warnings.extend(analyzer.warnings)
        return entities

    def run(self, source: SchemaSource) -> GenerationResult:
        """
        Generate every artifact for the entities of a schema source.

        Returns:
            Result with written files, resolved order, warnings and failures

        Raises:
            CircularDependencyError: If the entities cannot be ordered
            SchemaSourceError: If discovery itself fails
        """
        result = GenerationResult()
        discovered_types = source.discover()
        entities = self.analyze(discovered_types, result)
        ordered = self.resolver.resolve(entities)
        result.order = [entity.identity for entity in ordered]
        logger.info("Generating codecs for %d entities", len(ordered))

        definitions: list[CodecDefinition] = []
        field_modules: dict[str, str] = {}

        for entity in ordered:
            try:
                definition, codec_source = self.codec_emitter.emit(entity)
                self._write(result, definition.module, codec_source)

                if self.config.generate_fields:
                    module, fields_source = self.fields_emitter.emit(entity)
                    self._write(result, module, fields_source)
                    field_modules[self.fields_emitter.class_name(entity)] = module
            except ENTITY_ERRORS as e:
                logger.error("Failed to generate %s: %s", entity.identity, e)
                result.failures[entity.identity] = str(e)
                continue

            definitions.append(definition)

        registry_module = None
        if self.config.generate_registry:
            registry_module = self._emit_registry(discovered_types, result)

        if self.config.generate_wiring:
            self._emit_wiring(definitions, field_modules, registry_module, result)

        result.metadata.update(
            {
                "package": self.config.package_name,
                "entity_count": len(ordered),
                "codec_count": len(definitions),
                "table_count": sum(1 for discovered in discovered_types if discovered.is_table),
            }
        )
        if result.failures:
            logger.warning(
                "Generation finished with %d failed entities", len(result.failures)
            )
        return result

    def _emit_registry(
        self, discovered_types: Sequence[DiscoveredType], result: GenerationResult
    ) -> Optional[str]:
        try:
            emitted = self.registry_emitter.emit(discovered_types)
            if emitted is None:
                result.warnings.append("No @table entities; table name registry not generated")
                return None
            module, source = emitted
            self._write(result, module, source)
        except ENTITY_ERRORS as e:
            logger.error("Failed to generate table name registry: %s", e)
            result.failures[self.registry_emitter.module] = str(e)
            return None
        return module

    def _emit_wiring(
        self,
        definitions: Sequence[CodecDefinition],
        field_modules: dict[str, str],
        registry_module: Optional[str],
        result: GenerationResult,
    ) -> None:
        try:
            module, source, warnings = self.wiring_emitter.emit(
                definitions, field_modules, registry_module
            )
            result.warnings.extend(warnings)
            self._write(result, module, source)
        except ENTITY_ERRORS as e:
            logger.error("Failed to generate package wiring: %s", e)
            result.failures[f"{self.config.package_name}.__init__"] = str(e)

    def _write(self, result: GenerationResult, module: str, source: str) -> None:
        location = self.writer.write(module, source)
        result.files[module] = location


def generate_codecs(
    targets: Union[Sequence[str], Iterable[type]],
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[GeneratorConfig] = None,
    writer: Optional[CodeWriter] = None,
    **overrides: Any,
) -> GenerationResult:
    """
    Generate codecs for modules (dotted names) or entity classes.

    Fatal errors (configuration, discovery, cycles) are returned as a failed
    result instead of raised.

    Args:
        targets: Module names to scan or entity classes
        output_dir: Directory receiving the generated package
        config: Base configuration (defaults when omitted)
        writer: Explicit code writer (overrides output_dir)
        **overrides: Configuration overrides, e.g. ``package_name``

    Returns:
        GenerationResult
    """
    try:
        if config is None or overrides:
            base = {} if config is None else _config_dict(config)
            base.update(overrides)
            if output_dir is not None:
                base["output_dir"] = str(output_dir)
            config = load_config(custom_config=base)
        elif output_dir is not None:
            config = replace(config, output_dir=str(output_dir))

        targets = list(targets)
        if all(isinstance(target, str) for target in targets):
            source: SchemaSource = ModuleSchemaSource(targets)
        else:
            source = ClassSchemaSource(targets)

        return CodecGenerationPipeline(config, writer).run(source)
    except (GeneratorError, ConfigError, TemplateError) as e:
        logger.error("Code generation failed: %s", e)
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)


def _config_dict(config: GeneratorConfig) -> dict[str, Any]:
    values = asdict(config)
    values.update(values.pop("custom"))
    return values

