"""
Shared base of the artifact emitters and the result of a generation run.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import GeneratorConfig
from .templates import TemplateEngine, create_template_engine

TEMPLATE_DIRECTORY = Path(__file__).resolve().parent.parent / "emitters" / "templates"

_EXCESS_BLANK_LINES = re.compile(r"\n{4,}")


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class TemplateEmitter(ABC):
    """Base class of emitters that render one kind of artifact from templates."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        template_engine: Optional[TemplateEngine] = None,
    ):
        self.config = config or GeneratorConfig()
        self._engine = template_engine

    @property
    @abstractmethod
    def artifact_kind(self) -> str:
        """Short label of the artifact, used in logs."""

    @property
    def template_engine(self) -> TemplateEngine:
        if self._engine is None:
            self._engine = create_template_engine(TEMPLATE_DIRECTORY)
        return self._engine

    def module_name(self, leaf: str) -> str:
        """Dotted name of a module inside the generated package."""
        return f"{self.config.package_name}.{leaf}"

    @staticmethod
    def format_code(code: str) -> str:
        """
        Normalize rendered source.

        Trailing whitespace is stripped, runs of blank lines are capped at two
        and the text ends in exactly one newline.
        """
        text = "\n".join(line.rstrip() for line in code.splitlines())
        text = _EXCESS_BLANK_LINES.sub("\n\n\n", text)
        return text.strip("\n") + "\n"

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template and normalize the result."""
        return self.format_code(self.template_engine.render_template(template_name, context))


class GenerationResult:
    """Outcome of one generation run."""

    def __init__(
        self,
        files: Optional[Dict[str, str]] = None,
        order: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        failures: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            files: Dotted module name -> where it was written
            order: Entity identities in generation order
            warnings: Non-fatal problems, in the order they were found
            failures: Entity identity (or artifact module) -> error message
            metadata: Run statistics
        """
        self.files = files if files is not None else {}
        self.order = order if order is not None else []
        self.warnings = warnings if warnings is not None else []
        self.failures = failures if failures is not None else {}
        self.metadata = metadata if metadata is not None else {}
        self.error_message: Optional[str] = None
        self.exception: Optional[Exception] = None

    @property
    def success(self) -> bool:
        """True when the run was not aborted and no entity failed."""
        return self.error_message is None and not self.failures

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None) -> "GenerationResult":
        """Result of a run that was aborted before producing anything usable."""
        result = cls()
        result.error_message = message
        result.exception = exception
        return result
