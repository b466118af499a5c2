"""
Jinja2 environment for emitting Python source.

Templates render whole modules; ``field_mappings.py.j2`` is a macro library
whose macros are called from Python to build per-field statement blocks.
"""

from pathlib import Path
from typing import Any, Dict

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)


class TemplateError(Exception):
    """Raised when a template cannot be loaded or rendered."""

    pass


def indent_lines(text: str, width: int = 4) -> str:
    """Indent every non-blank line, including the first."""
    prefix = " " * width
    return "\n".join(prefix + line if line.strip() else "" for line in str(text).split("\n"))


class TemplateEngine:
    """Jinja2 environment configured for source code output."""

    def __init__(self, template_dir: Path):
        """
        Args:
            template_dir: Directory of ``*.j2`` files
        """
        self.template_dir = template_dir

        # Undefined variables are template bugs, never empty output
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["indent"] = indent_lines
        self._env.filters["pyrepr"] = repr

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a module template.

        Raises:
            TemplateError: If the template is missing or fails to render
        """
        template = self._load(template_name)
        try:
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def get_template_module(self, template_name: str) -> Any:
        """Return the exported macros of a template as attributes."""
        template = self._load(template_name)
        try:
            return template.module
        except Exception as e:
            raise TemplateError(f"Failed to evaluate template {template_name}: {e}") from e

    def call_macro(self, template_name: str, macro_name: str, *args: Any) -> str:
        """Call one macro of a template and return its text."""
        macro = getattr(self.get_template_module(template_name), macro_name, None)
        if macro is None:
            raise TemplateError(f"Template {template_name} has no macro {macro_name}")
        try:
            return str(macro(*args))
        except Exception as e:
            raise TemplateError(f"Macro {template_name}:{macro_name} failed: {e}") from e

    def _load(self, template_name: str):
        try:
            return self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except Exception as e:
            raise TemplateError(f"Failed to load template {template_name}: {e}") from e


_engines: Dict[Path, TemplateEngine] = {}


def create_template_engine(template_dir: Path) -> TemplateEngine:
    """Return the shared engine of a template directory."""
    if template_dir not in _engines:
        _engines[template_dir] = TemplateEngine(template_dir)
    return _engines[template_dir]
