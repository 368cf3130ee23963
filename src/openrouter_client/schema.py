"""JSON Schema generation for structured outputs.

Produces a flat, strict object schema from a class's annotated public fields.
Nested types are rendered as ``object`` without recursing.
"""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from decimal import Decimal
from typing import Any, ClassVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .exceptions import InvalidArgumentError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_PRIMITIVE_TYPES: dict[type, str] = {
    str: "string",
    bool: "boolean",
    int: "integer",
    float: "number",
    Decimal: "number",
}

_ARRAY_ORIGINS = (list, tuple, set, frozenset)


def to_snake_case(name: str) -> str:
    """Convert ``camelCase``/``PascalCase`` to ``snake_case``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _is_optional(annotation: Any) -> bool:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return type(None) in get_args(annotation)
    return annotation is type(None) or annotation is Any


def _strip_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def json_type_for(annotation: Any) -> str:
    """Map a Python annotation to a JSON Schema primitive type name."""
    annotation = _strip_optional(annotation)
    if get_origin(annotation) is typing.Annotated:
        annotation = get_args(annotation)[0]
    # bool before int: bool is an int subclass
    for py_type in (bool, str, int, float, Decimal):
        if annotation is py_type:
            return _PRIMITIVE_TYPES[py_type]
    origin = get_origin(annotation) or annotation
    if isinstance(origin, type) and issubclass(origin, _ARRAY_ORIGINS):
        return "array"
    return "object"


def _field_annotations(cls: type) -> dict[str, Any]:
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return {name: f.annotation for name, f in cls.model_fields.items()}

    hints = get_type_hints(cls, include_extras=True)
    if dataclasses.is_dataclass(cls):
        return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(cls)}
    return {
        name: hint
        for name, hint in hints.items()
        if get_origin(hint) is not ClassVar and hint is not ClassVar
    }


def generate_json_schema(cls: type) -> dict[str, Any]:
    """Build a JSON Schema object describing ``cls``.

    Args:
        cls: A plain annotated class, a dataclass, or a pydantic model

    Returns:
        ``{"type": "object", "properties": ..., "required": [...],
        "additionalProperties": False}``

    Raises:
        InvalidArgumentError: If ``cls`` is not a class or has no annotated fields
    """
    if not isinstance(cls, type):
        raise InvalidArgumentError(
            f"Expected a class, got {type(cls).__name__}", argument="type"
        )

    annotations = {
        name: hint
        for name, hint in _field_annotations(cls).items()
        if not name.startswith("_")
    }
    if not annotations:
        raise InvalidArgumentError(
            f"{cls.__name__} has no annotated public fields", argument="type"
        )

    properties: dict[str, Any] = {}
    required: list[str] = []
    for name, hint in annotations.items():
        key = to_snake_case(name)
        properties[key] = {"type": json_type_for(hint)}
        if not _is_optional(hint):
            required.append(key)

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }
