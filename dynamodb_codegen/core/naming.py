"""
Identifier handling for generated Python modules.

Entity, field and codec names are user input; everything that ends up as a
module, parameter, attribute or constant name goes through here so it is a
valid, non-clashing Python identifier.
"""

import keyword
import re
from enum import Enum
from typing import Dict, Iterable, Optional, Set


class NamingCase(Enum):
    """Identifier styles used in generated code."""
    SNAKE_CASE = "snake"                 # route_geometry
    SCREAMING_SNAKE = "screaming_snake"  # ROUTE_GEOMETRY


# Lower-cased, so True/False/None are caught in any case style
PYTHON_RESERVED = frozenset(word.lower() for word in keyword.kwlist)

PYTHON_BUILTINS = frozenset({
    'bool', 'bytes', 'dict', 'float', 'format', 'hash', 'id', 'int', 'iter',
    'len', 'list', 'map', 'max', 'min', 'next', 'object', 'property', 'range',
    'repr', 'set', 'str', 'super', 'tuple', 'type', 'vars',
})

# Names bound inside generated codec bodies
GENERATED_LOCALS = frozenset({
    'self', 'value', 'values', 'attributes', 'decoded', 'item', 'items', 'mu',
})

_WORD_BOUNDARIES = (
    (re.compile(r'([A-Z]+)([A-Z][a-z])'), r'\1_\2'),  # HTTPServer -> HTTP_Server
    (re.compile(r'([a-z0-9])([A-Z])'), r'\1_\2'),     # routeId -> route_Id
)


def to_snake_case(name: str) -> str:
    """Convert CamelCase, kebab-case or mixed input to snake_case."""
    text = re.sub(r'[^0-9A-Za-z]+', '_', name)
    for pattern, replacement in _WORD_BOUNDARIES:
        text = pattern.sub(replacement, text)
    return re.sub(r'_{2,}', '_', text).strip('_').lower()


_CONVERTERS = {
    NamingCase.SNAKE_CASE: to_snake_case,
    NamingCase.SCREAMING_SNAKE: lambda name: to_snake_case(name).upper(),
}


class NameSanitizer:
    """
    Hands out unique identifiers within one generated scope.

    The same source name always maps to the same identifier. Distinct names
    that collapse to one identifier are numbered ``_1``, ``_2`` and so on.
    """

    def __init__(self, forbidden: Optional[Iterable[str]] = None):
        """
        Args:
            forbidden: Lower-case names that get a trailing underscore
        """
        self.forbidden: Set[str] = set(forbidden or ())
        self._assigned: Dict[tuple, str] = {}
        self._taken: Set[str] = set()

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.SNAKE_CASE) -> str:
        """Return the identifier for ``name`` in the requested case."""
        key = (name, target_case)
        if key not in self._assigned:
            self._assigned[key] = self._claim(self._identifier(name, target_case))
        return self._assigned[key]

    def _identifier(self, name: str, target_case: NamingCase) -> str:
        identifier = _CONVERTERS[target_case](name) or "field"
        if identifier[0].isdigit():
            identifier = f"n{identifier}"
        if identifier.lower() in self.forbidden:
            identifier += "_"
        return identifier

    def _claim(self, identifier: str) -> str:
        candidate, counter = identifier, 0
        while candidate in self._taken:
            counter += 1
            candidate = f"{identifier}_{counter}"
        self._taken.add(candidate)
        return candidate

    def add_used_name(self, name: str):
        """Reserve a name that is bound by the surrounding template."""
        self._taken.add(name)


def create_python_sanitizer() -> NameSanitizer:
    """Sanitizer for parameters and attributes of generated classes."""
    return NameSanitizer(PYTHON_RESERVED | PYTHON_BUILTINS | GENERATED_LOCALS)


def create_constant_sanitizer() -> NameSanitizer:
    """Sanitizer for upper-case constants, which only keywords can clash with."""
    return NameSanitizer(PYTHON_RESERVED)


def module_basename(class_name: str) -> str:
    """Module stem of a class: ``RouteGeometry`` -> ``route_geometry``."""
    stem = to_snake_case(class_name) or "entity"
    if stem in PYTHON_RESERVED:
        stem += "_"
    return stem
