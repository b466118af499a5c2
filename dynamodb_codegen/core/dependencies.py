"""
Dependency ordering of schema entities.

Codecs receive the codecs of the entities they reference through their
constructor, so every entity must be generated (and wired) after the
entities it depends on. Ordering uses Kahn's algorithm over the edges
whose target belongs to the current batch.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .generator import GeneratorError
from .schema import SchemaEntity

logger = get_logger(__name__)


class CircularDependencyError(GeneratorError):
    """Raised when entities cannot be ordered because they depend on each other."""

    def __init__(self, unresolved: Iterable[str], cycle: Optional[List[str]] = None):
        self.unresolved = tuple(sorted(unresolved))
        self.cycle = tuple(cycle) if cycle else ()
        message = (
            f"Circular dependency detected among {len(self.unresolved)} "
            f"entities: {', '.join(self.unresolved)}"
        )
        if self.cycle:
            message += f" (cycle: {' -> '.join(self.cycle)})"
        super().__init__(message)


class DependencyGraph:
    """Directed graph of entity identities, dependent -> dependency."""

    def __init__(self, entities: Iterable[SchemaEntity]):
        self.entities: Dict[str, SchemaEntity] = {}
        codec_owners: Dict[str, str] = {}

        for entity in entities:
            if entity.identity in self.entities:
                raise GeneratorError(f"Duplicate entity identity: {entity.identity}")
            owner = codec_owners.get(entity.codec_identity)
            if owner is not None:
                raise GeneratorError(
                    f"Entities {owner} and {entity.identity} would both generate "
                    f"{entity.codec_identity}"
                )
            self.entities[entity.identity] = entity
            codec_owners[entity.codec_identity] = entity.identity

        self.codec_owners = codec_owners
        self.edges: Dict[str, Set[str]] = {
            identity: self._resolve_edges(entity)
            for identity, entity in self.entities.items()
        }

    def _resolve_edges(self, entity: SchemaEntity) -> Set[str]:
        """Map codec references back to entity identities, dropping unknown ones."""
        targets = set()
        for codec_identity in entity.dependencies:
            owner = self.codec_owners.get(codec_identity)
            if owner is None:
                logger.debug(
                    "%s references %s outside this batch; not an ordering constraint",
                    entity.identity,
                    codec_identity,
                )
                continue
            targets.add(owner)
        return targets

    def dependents(self) -> Dict[str, Set[str]]:
        """Reverse adjacency: dependency -> entities that need it."""
        reverse: Dict[str, Set[str]] = {identity: set() for identity in self.entities}
        for identity, targets in self.edges.items():
            for target in targets:
                reverse[target].add(identity)
        return reverse

    def find_cycle(self, nodes: Set[str]) -> List[str]:
        """Return one cycle among the given nodes as a closed path, or []."""
        WHITE, GREY, BLACK = 0, 1, 2
        color = {node: WHITE for node in nodes}
        stack: List[str] = []

        def visit(node: str) -> List[str]:
            color[node] = GREY
            stack.append(node)
            for target in sorted(self.edges[node] & nodes):
                if color[target] == GREY:
                    return stack[stack.index(target):] + [target]
                if color[target] == WHITE:
                    found = visit(target)
                    if found:
                        return found
            stack.pop()
            color[node] = BLACK
            return []

        for node in sorted(nodes):
            if color[node] == WHITE:
                found = visit(node)
                if found:
                    return found
        return []


class DependencyResolver:
    """Computes a generation order with dependencies before dependents."""

    def resolve(self, entities: Iterable[SchemaEntity]) -> List[SchemaEntity]:
        """
        Order entities topologically.

        Args:
            entities: All entities of the current batch

        Returns:
            Entities with every dependency strictly before its dependents

        Raises:
            CircularDependencyError: If no valid order exists
        """
        graph = DependencyGraph(entities)
        order = self.resolve_graph(graph)
        return [graph.entities[identity] for identity in order]

    def resolve_graph(self, graph: DependencyGraph) -> List[str]:
        """Kahn's algorithm over a prepared graph, returning identities."""
        in_degree = {identity: len(targets) for identity, targets in graph.edges.items()}
        dependents = graph.dependents()

        queue = deque(sorted(node for node, degree in in_degree.items() if degree == 0))
        order: List[str] = []

        while queue:
            node = queue.popleft()
            order.append(node)
            for dependent in sorted(dependents[node]):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        if len(order) < len(in_degree):
            unresolved = set(in_degree) - set(order)
            raise CircularDependencyError(unresolved, graph.find_cycle(unresolved))

        logger.debug("Resolved generation order: %s", ", ".join(order))
        return order


def check_order(order: List[SchemaEntity]) -> List[Tuple[str, str]]:
    """
    Return every (dependent, dependency) pair that the order violates.

    An empty list means each in-batch dependency appears before its dependent.
    """
    graph = DependencyGraph(order)
    position = {entity.identity: index for index, entity in enumerate(order)}
    return [
        (identity, target)
        for identity, targets in graph.edges.items()
        for target in sorted(targets)
        if position[target] >= position[identity]
    ]
