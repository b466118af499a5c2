"""
Code writers persist rendered modules.

Modules are addressed by dotted name; the file writer lays them out as a
regular package tree below its output directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..logging_config import get_logger
from .generator import GeneratorError

logger = get_logger(__name__)

INIT_MODULE = "__init__"


class CodeWriterError(GeneratorError):
    """Raised when generated source cannot be persisted."""


class CodeWriter(Protocol):
    """Persists generated source text for a dotted module name."""

    def write(self, module: str, source: str) -> str:
        """Persist ``source`` and return where it went."""
        ...


class FileCodeWriter:
    """Writes modules as ``.py`` files below an output directory."""

    def __init__(self, output_dir: str | Path):
        self.output_dir = Path(output_dir)

    def path_for(self, module: str) -> Path:
        """File path of a dotted module name (``a.b`` -> ``a/b.py``)."""
        parts = module.split(".")
        return self.output_dir.joinpath(*parts[:-1], f"{parts[-1]}.py")

    def write(self, module: str, source: str) -> str:
        path = self.path_for(module)
        try:
            self._ensure_packages(path.parent)
            path.write_text(source, encoding="utf-8")
        except OSError as e:
            raise CodeWriterError(f"Failed to write {module} to {path}: {e}") from e

        logger.debug("Wrote %s (%d bytes)", path, len(source))
        return str(path)

    def _ensure_packages(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)

        # Every directory between output_dir and the module is a package
        current = directory
        while current != self.output_dir and self.output_dir in current.parents:
            init_file = current / f"{INIT_MODULE}.py"
            if not init_file.exists():
                init_file.write_text("", encoding="utf-8")
            current = current.parent


class InMemoryCodeWriter:
    """Keeps rendered modules in a dict; used for dry runs and tests."""

    def __init__(self):
        self.modules: dict[str, str] = {}

    def write(self, module: str, source: str) -> str:
        self.modules[module] = source
        return f"<memory>/{module.replace('.', '/')}.py"

    def __getitem__(self, module: str) -> str:
        return self.modules[module]

    def __contains__(self, module: object) -> bool:
        return module in self.modules
