"""
Table name registry emitter.

Aggregates every entity marked with ``@table`` into one read-only module
mapping entity identity to table name. The module is rebuilt from scratch
on each run.
"""

from typing import Iterable, Optional, Tuple

from ..core.generator import TemplateEmitter
from ..core.schema import DiscoveredType
from ..logging_config import get_logger

logger = get_logger(__name__)

REGISTRY_TEMPLATE = "table_name_resolver.py.j2"


class TableNameRegistryEmitter(TemplateEmitter):
    """Renders the ``resolve_table_name`` registry module."""

    @property
    def artifact_kind(self) -> str:
        return "registry"

    @property
    def module(self) -> str:
        return self.module_name(self.config.registry_module)

    def emit(self, discovered_types: Iterable[DiscoveredType]) -> Optional[Tuple[str, str]]:
        """
        Render the registry for all discovered table entities.

        Tables are taken from discovery, not classification, so a table whose
        codec could not be generated still resolves.

        Returns:
            (dotted module name, module source), or None when no entity is a table
        """
        tables = sorted(
            (discovered for discovered in discovered_types if discovered.is_table),
            key=lambda discovered: discovered.identity,
        )
        if not tables:
            logger.warning("No @table entities found; skipping table name registry")
            return None

        source = self.render_template(
            REGISTRY_TEMPLATE,
            {
                "tables": tables,
                "known_tables": ", ".join(discovered.identity for discovered in tables),
            },
        )
        logger.info("Table name registry covers %d tables", len(tables))
        return self.module, source
