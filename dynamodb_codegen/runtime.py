"""
Runtime helpers imported by generated codecs.

Attribute values use the low-level boto3 client shape: ``{"S": "..."}``,
``{"N": "..."}``, ``{"BOOL": True}``, ``{"SS": [...]}``, ``{"L": [...]}``
and ``{"M": {...}}``. ``None`` stands for an absent value.

Nothing in here raises for malformed attribute values or for entity fields
holding the wrong shape. Getters and constructors answer ``None`` and list
helpers drop what they cannot convert, which lets a codec skip one bad field
instead of failing the whole record.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Optional, TypeVar

import dateparser

from .logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")
E = TypeVar("E", bound=enum.Enum)

AttributeValue = dict[str, Any]
Number = int | float | decimal.Decimal

_DATEPARSER_SETTINGS = {
    "STRICT_PARSING": True,
    "RETURN_AS_TIMEZONE_AWARE": True,
    "TIMEZONE": "UTC",
}


class UnknownEntityError(ValueError):
    """Raised by generated resolvers for types they were not generated for."""


# Constructors


def create_string_attribute(value: Optional[str]) -> Optional[AttributeValue]:
    if not isinstance(value, str):
        return None
    return {"S": value}


def create_number_attribute(value: Optional[Number]) -> Optional[AttributeValue]:
    if isinstance(value, bool) or not isinstance(value, (int, float, decimal.Decimal)):
        return None
    return {"N": format_number(value)}


def create_bool_attribute(value: Optional[bool]) -> Optional[AttributeValue]:
    if not isinstance(value, bool):
        return None
    return {"BOOL": value}


def create_string_set_attribute(values: Optional[Iterable[str]]) -> Optional[AttributeValue]:
    """String set of the distinct string values; absent when nothing is left."""
    if not is_collection(values):
        return None
    members = list(dict.fromkeys(value for value in values if isinstance(value, str)))
    if not members:
        return None
    return {"SS": members}


def create_list_attribute(values: Optional[Iterable[AttributeValue]]) -> Optional[AttributeValue]:
    """List attribute; an empty list is still a value, only None is absent."""
    if values is None:
        return None
    return {"L": [value for value in values if value is not None]}


def create_map_attribute(values: Optional[Mapping[str, Any]]) -> Optional[AttributeValue]:
    """Map attribute without absent entries."""
    if values is None:
        return None
    return {"M": {key: value for key, value in values.items() if value is not None}}


def format_number(value: Number) -> str:
    """Canonical text of a number, parsed back exactly by ``get_number_safely``."""
    if isinstance(value, float):
        return repr(value)
    return str(value)


def format_instant(value: Any) -> Optional[str]:
    if not isinstance(value, datetime.datetime):
        return None
    return value.isoformat()


def enum_name_of(value: Any) -> Optional[str]:
    """Member name of an enum value, None for anything else."""
    if not isinstance(value, enum.Enum):
        return None
    return value.name


# Getters


def _tagged(attribute: Any, tag: str) -> Any:
    if not isinstance(attribute, Mapping):
        return None
    return attribute.get(tag)


def get_string_safely(attribute: Any) -> Optional[str]:
    value = _tagged(attribute, "S")
    return value if isinstance(value, str) else None


def get_number_safely(attribute: Any, kind: type = float) -> Optional[Number]:
    """
    Parse an N attribute into ``kind`` (int, float or Decimal).

    Integral kinds accept integral text only, so "1.5" is not truncated.
    """
    text = _tagged(attribute, "N")
    return parse_number_safely(text, kind)


def parse_number_safely(text: Any, kind: type = float) -> Optional[Number]:
    if isinstance(text, bool) or not isinstance(text, (str, int, float, decimal.Decimal)):
        return None
    try:
        if kind is int:
            return int(text) if not isinstance(text, float) else None
        if kind is decimal.Decimal:
            return decimal.Decimal(str(text))
        return float(text)
    except (ValueError, ArithmeticError):
        return None


def get_bool_safely(attribute: Any) -> Optional[bool]:
    value = _tagged(attribute, "BOOL")
    return value if isinstance(value, bool) else None


def get_string_set_safely(attribute: Any) -> Optional[list[str]]:
    values = _tagged(attribute, "SS")
    if not isinstance(values, (list, tuple, set, frozenset)):
        return None
    return [value for value in values if isinstance(value, str)]


def get_list_safely(attribute: Any) -> Optional[list[Any]]:
    values = _tagged(attribute, "L")
    if not isinstance(values, (list, tuple)):
        return None
    return list(values)


def get_map_safely(attribute: Any) -> Optional[Mapping[str, Any]]:
    values = _tagged(attribute, "M")
    if not isinstance(values, Mapping):
        return None
    return values


# Scalar conversions


def parse_instant_safely(value: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parse a timestamp string, returning None when it is not one.

    ISO 8601 (what the codecs write) is parsed exactly; other well-formed
    timestamps written by foreign producers go through dateparser.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.datetime.fromisoformat(value)
    except ValueError:
        pass
    try:
        parsed = dateparser.parse(value, settings=_DATEPARSER_SETTINGS)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Unparsable timestamp %r: %s", value, e)
        return None
    if parsed is None:
        logger.debug("Unparsable timestamp %r", value)
    return parsed


def parse_enum_safely(name: Optional[str], enum_cls: type[E]) -> Optional[E]:
    """Resolve an enum member by name, None if unknown."""
    if not isinstance(name, str):
        return None
    try:
        return enum_cls[name]
    except KeyError:
        logger.debug("Unknown %s name %r", enum_cls.__name__, name)
        return None


# Collections


def is_collection(values: Any) -> bool:
    """True for iterables of values; strings, bytes and mappings are not."""
    return isinstance(values, Iterable) and not isinstance(values, (str, bytes, bytearray, Mapping))


def map_list(values: Optional[Iterable[T]], function: Callable[[T], Optional[R]]) -> list[R]:
    """Apply ``function`` to every value, dropping absent inputs and results."""
    if not is_collection(values):
        return []
    results = []
    for value in values:
        if value is None:
            continue
        result = function(value)
        if result is not None:
            results.append(result)
    return results


def encode_numbers(values: Optional[Iterable[Number]]) -> Optional[list[AttributeValue]]:
    if not is_collection(values):
        return None
    return map_list(values, create_number_attribute)


def decode_numbers(attributes: Optional[Iterable[Any]], kind: type = float) -> list[Number]:
    return map_list(attributes, lambda attribute: get_number_safely(attribute, kind))


def encode_nested_numbers(
    rows: Optional[Iterable[Optional[Iterable[Number]]]],
) -> list[AttributeValue]:
    """Encode a number matrix; empty, absent and non-list rows are dropped."""
    encoded = []
    if not is_collection(rows):
        return encoded
    for row in rows:
        numbers = encode_numbers(row)
        if numbers:
            encoded.append({"L": numbers})
    return encoded


def decode_nested_numbers(attributes: Optional[Iterable[Any]], kind: type = float) -> list[list[Number]]:
    """Decode a number matrix, dropping unparsable numbers and empty rows."""
    decoded = []
    for attribute in attributes or ():
        row = decode_numbers(get_list_safely(attribute), kind)
        if row:
            decoded.append(row)
    return decoded


# Entities


def build_entity(entity_cls: type[T], values: Mapping[str, Any]) -> T:
    """
    Instantiate a dataclass from decoded field values.

    Fields without a decoded value keep their declared default; required
    fields without one are set to None.
    """
    kwargs = {}
    for dc_field in dataclasses.fields(entity_cls):
        if not dc_field.init:
            continue
        if dc_field.name in values:
            kwargs[dc_field.name] = values[dc_field.name]
        elif (
            dc_field.default is dataclasses.MISSING
            and dc_field.default_factory is dataclasses.MISSING
        ):
            kwargs[dc_field.name] = None
    return entity_cls(**kwargs)


def param_value_of(value: Any) -> AttributeValue:
    """
    Attribute value for a query or condition expression parameter.

    Raises:
        ValueError: For None or values that are not str, bool or a number
    """
    if value is None:
        raise ValueError("Parameter value must not be None")
    if isinstance(value, bool):
        return {"BOOL": value}
    if isinstance(value, str):
        return {"S": value}
    if isinstance(value, (int, float, decimal.Decimal)):
        return {"N": format_number(value)}
    if isinstance(value, enum.Enum):
        return {"S": value.name}
    if isinstance(value, datetime.datetime):
        return {"S": format_instant(value)}
    raise ValueError(f"Unsupported parameter type: {type(value).__name__}")
