"""Structural validator for tool input schemas.

Covers the JSON-Schema subset the tools use: an object with ``properties``,
a ``required`` list and primitive ``type`` tags. Nested schemas are not
descended into.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kb_rag.domain.errors import ConfigurationError, ValidationError

_TYPE_CHECKS: dict[str, Any] = {
    "string": lambda v: isinstance(v, str),
    "number": lambda v: isinstance(v, int | float) and not isinstance(v, bool),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "object": lambda v: isinstance(v, Mapping),
    "array": lambda v: isinstance(v, list | tuple),
    "null": lambda v: v is None,
}

PRIMITIVE_TYPES = frozenset(_TYPE_CHECKS)


def _type_tags(prop: Mapping[str, Any]) -> list[str]:
    tag = prop.get("type")
    if tag is None:
        return []
    return [tag] if isinstance(tag, str) else list(tag)


def check_schema(schema: Mapping[str, Any]) -> None:
    """Reject schemas the validator cannot enforce.

    Raises:
        ConfigurationError: schema is not a well-formed object schema
    """
    if not isinstance(schema, Mapping) or schema.get("type") != "object":
        raise ConfigurationError("input schema must be an object schema")
    properties = schema.get("properties", {})
    if not isinstance(properties, Mapping):
        raise ConfigurationError("input schema 'properties' must be a mapping")
    for name, prop in properties.items():
        if not isinstance(prop, Mapping):
            raise ConfigurationError(f"property '{name}' must be a mapping")
        unknown = [t for t in _type_tags(prop) if t not in PRIMITIVE_TYPES]
        if unknown:
            raise ConfigurationError(f"property '{name}' has unknown type {unknown}")
    required = schema.get("required", [])
    if not isinstance(required, list | tuple):
        raise ConfigurationError("input schema 'required' must be a list")
    missing = [r for r in required if r not in properties]
    if missing:
        raise ConfigurationError(f"required fields not declared in properties: {missing}")


def validate_arguments(schema: Mapping[str, Any], args: Any) -> None:
    """Check required-field presence and primitive types of ``args``.

    Raises:
        ValidationError: arguments do not satisfy the schema
    """
    if not isinstance(args, Mapping):
        raise ValidationError("arguments must be an object")
    required = schema.get("required", [])
    for name in required:
        if args.get(name) is None:
            raise ValidationError(f"missing required field '{name}'")
    properties = schema.get("properties", {})
    for name, value in args.items():
        prop = properties.get(name)
        if prop is None or (value is None and name not in required):
            continue
        tags = _type_tags(prop)
        if tags and not any(_TYPE_CHECKS[t](value) for t in tags):
            raise ValidationError(
                f"field '{name}' must be of type {' | '.join(tags)}, "
                f"got {type(value).__name__}"
            )
