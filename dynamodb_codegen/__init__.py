"""
DynamoDB codec generation.

Generates encode/decode codecs between annotated dataclasses and DynamoDB
attribute values, plus field name constants and a table name registry.
"""

from .annotations import dynamo_mappable, table
from .core import (
    CircularDependencyError,
    ClassificationError,
    GeneratorConfig,
    GeneratorError,
    GenerationResult,
    MappingStrategy,
    load_config,
)
from .emitters import UnsupportedMappingError
from .pipeline import CodecGenerationPipeline, generate_codecs

# Version info
__version__ = "0.1.0"


def generate_source(*classes, **options):
    """
    Quick in-memory generation for a few entity classes.

    Args:
        *classes: Entity classes
        **options: Configuration overrides

    Returns:
        Dict of dotted module name -> generated source
    """
    from .core.writer import InMemoryCodeWriter

    writer = InMemoryCodeWriter()
    result = generate_codecs(classes, writer=writer, **options)

    if not result.success:
        raise GeneratorError(
            result.error_message or f"Code generation failed: {result.failures}"
        )
    return dict(writer.modules)


# Export main interfaces
__all__ = [
    "CircularDependencyError",
    "ClassificationError",
    "CodecGenerationPipeline",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "MappingStrategy",
    "UnsupportedMappingError",
    "dynamo_mappable",
    "generate_codecs",
    "generate_source",
    "load_config",
    "table",
]
