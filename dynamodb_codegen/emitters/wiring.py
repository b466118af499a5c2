"""
Package wiring emitter.

Writes the generated package's ``__init__`` module, which composes the
codecs explicitly: each codec is constructed after, and receives, the
codecs it depends on.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.generator import TemplateEmitter
from ..core.naming import NamingCase, create_python_sanitizer
from ..logging_config import get_logger
from .codec import CodecDefinition

logger = get_logger(__name__)

INIT_TEMPLATE = "package_init.py.j2"


@dataclass
class WiredCodec:
    attribute: str
    class_name: str
    arguments: List[Tuple[str, str]] = field(default_factory=list)


class WiringEmitter(TemplateEmitter):
    """Renders ``Codecs`` and ``create_codecs`` for the generated package."""

    @property
    def artifact_kind(self) -> str:
        return "wiring"

    def plan(self, definitions: Sequence[CodecDefinition]) -> Tuple[List[WiredCodec], List[str]]:
        """
        Decide construction statements for codecs given in resolved order.

        Returns:
            (wired codecs, warnings for codecs that cannot be constructed here)
        """
        sanitizer = create_python_sanitizer()
        sanitizer.add_used_name("codecs")
        variables: Dict[str, str] = {}
        wired = []
        warnings = []

        for definition in definitions:
            missing = [
                parameter.codec_identity
                for parameter in definition.parameters
                if parameter.codec_identity not in variables
            ]
            if missing:
                message = (
                    f"{definition.class_name} left out of create_codecs(): "
                    f"no generated codec for {', '.join(missing)}"
                )
                logger.warning("%s", message)
                warnings.append(message)
                continue

            attribute = sanitizer.sanitize_name(definition.class_name, NamingCase.SNAKE_CASE)
            variables[definition.entity.codec_identity] = attribute
            wired.append(
                WiredCodec(
                    attribute=attribute,
                    class_name=definition.class_name,
                    arguments=[
                        (parameter.name, variables[parameter.codec_identity])
                        for parameter in definition.parameters
                    ],
                )
            )

        return wired, warnings

    def emit(
        self,
        definitions: Sequence[CodecDefinition],
        field_modules: Optional[Dict[str, str]] = None,
        registry_module: Optional[str] = None,
    ) -> Tuple[str, str, List[str]]:
        """
        Render the package ``__init__`` module.

        Args:
            definitions: Successfully emitted codecs, in resolved order
            field_modules: Constant class name -> dotted module
            registry_module: Dotted module of the table registry, if emitted

        Returns:
            (dotted module name, module source, warnings)
        """
        wired, warnings = self.plan(definitions)
        package = self.config.package_name

        imports = [
            f"from .{self._leaf(definition.module)} import {definition.class_name}"
            for definition in definitions
        ]
        exports = ["Codecs", "create_codecs"]
        exports += [definition.class_name for definition in definitions]

        for class_name, module in sorted((field_modules or {}).items()):
            imports.append(f"from .{self._leaf(module)} import {class_name}")
            exports.append(class_name)

        if registry_module:
            imports.append(
                f"from .{self._leaf(registry_module)} import TABLE_NAMES, resolve_table_name"
            )
            exports += ["TABLE_NAMES", "resolve_table_name"]

        source = self.render_template(
            INIT_TEMPLATE,
            {
                "add_comments": self.config.add_comments,
                "imports": imports,
                "wired": wired,
                "exports": exports,
            },
        )
        return f"{package}.__init__", source, warnings

    def _leaf(self, module: str) -> str:
        return module[len(self.config.package_name) + 1:]
