"""
Core codec generation components.

Schema model, classification, dependency ordering, configuration, naming,
templates and code writers shared by all emitters.
"""

from .generator import GeneratorError, GenerationResult, TemplateEmitter
from .schema import (
    DiscoveredType,
    FieldDescriptor,
    MappingStrategy,
    SchemaEntity,
    qualified_name,
)
from .classifier import (
    Classification,
    ClassificationError,
    CodecNaming,
    SchemaAnalyzer,
    TypeClassifier,
)
from .dependencies import CircularDependencyError, DependencyGraph, DependencyResolver
from .source import ClassSchemaSource, ModuleSchemaSource, SchemaSource, SchemaSourceError
from .writer import CodeWriter, CodeWriterError, FileCodeWriter, InMemoryCodeWriter
from .naming import NameSanitizer, NamingCase
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Base emitter interface
    "TemplateEmitter",
    "GeneratorError",
    "GenerationResult",
    # Schema model
    "DiscoveredType",
    "FieldDescriptor",
    "MappingStrategy",
    "SchemaEntity",
    "qualified_name",
    # Classification
    "Classification",
    "ClassificationError",
    "CodecNaming",
    "SchemaAnalyzer",
    "TypeClassifier",
    # Ordering
    "CircularDependencyError",
    "DependencyGraph",
    "DependencyResolver",
    # Schema sources and writers
    "ClassSchemaSource",
    "ModuleSchemaSource",
    "SchemaSource",
    "SchemaSourceError",
    "CodeWriter",
    "CodeWriterError",
    "FileCodeWriter",
    "InMemoryCodeWriter",
    # Naming utilities
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
