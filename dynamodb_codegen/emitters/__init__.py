"""
Artifact emitters: codecs, field constants, table registry and package wiring.
"""

from .codec import CodecDefinition, CodecEmitter, UnsupportedMappingError
from .constants import FieldConstantsEmitter
from .table_names import TableNameRegistryEmitter
from .wiring import WiringEmitter

__all__ = [
    "CodecDefinition",
    "CodecEmitter",
    "FieldConstantsEmitter",
    "TableNameRegistryEmitter",
    "UnsupportedMappingError",
    "WiringEmitter",
]
