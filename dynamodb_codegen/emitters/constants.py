"""
Field constant emitter: one class of attribute-name constants per entity.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ..core.generator import TemplateEmitter
from ..core.naming import NamingCase, create_constant_sanitizer, module_basename
from ..core.schema import SchemaEntity

FIELDS_TEMPLATE = "fields.py.j2"


@dataclass(frozen=True)
class FieldConstant:
    name: str
    value: str


class FieldConstantsEmitter(TemplateEmitter):
    """Renders ``<Name>Fields`` classes holding each field's attribute name."""

    @property
    def artifact_kind(self) -> str:
        return "fields"

    def class_name(self, entity: SchemaEntity) -> str:
        return f"{entity.simple_name}{self.config.fields_suffix}"

    def module_for(self, entity: SchemaEntity) -> str:
        stem = module_basename(entity.simple_name)
        return self.module_name(f"{stem}_{self.config.fields_suffix.lower()}")

    def constants(self, entity: SchemaEntity) -> List[FieldConstant]:
        """One constant per field, SCREAMING_SNAKE named and unique."""
        sanitizer = create_constant_sanitizer()
        return [
            FieldConstant(
                name=sanitizer.sanitize_name(descriptor.name, NamingCase.SCREAMING_SNAKE),
                value=descriptor.name,
            )
            for descriptor in entity.fields
        ]

    def emit(self, entity: SchemaEntity) -> Tuple[str, str]:
        """
        Render the constants module of an entity.

        Returns:
            (dotted module name, module source)
        """
        source = self.render_template(
            FIELDS_TEMPLATE,
            {
                "add_comments": self.config.add_comments,
                "entity_identity": entity.identity,
                "simple_name": entity.simple_name,
                "class_name": self.class_name(entity),
                "constants": self.constants(entity),
            },
        )
        return self.module_for(entity), source
