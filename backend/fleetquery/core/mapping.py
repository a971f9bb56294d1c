"""
Field description for bindable types.

describe(cls) returns the ordered FieldBinding tuple used by the parameter
binder (read side) and the result materializer (write side). Computed once
per type and cached.

A type can provide its description explicitly with a ``__describe__()``
classmethod; otherwise it is derived from pydantic model fields (name = alias
or attribute name) or dataclass fields, with the kind taken from the
annotation. Fields whose annotation maps to no ValueKind are left out.
"""

import dataclasses
import functools
import types
import typing
from collections.abc import Callable, Mapping
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, NamedTuple


class ValueKind(str, Enum):
    """Value kinds understood by the binder and the materializer."""

    BOOLEAN = "boolean"
    INTEGER = "integer"  # 32-bit
    LONG = "long"  # 64-bit
    DOUBLE = "double"
    STRING = "string"
    TIMESTAMP = "timestamp"
    MAPPING = "mapping"


# Annotation markers for integer width; plain ``int`` is LONG.
Int32 = Annotated[int, ValueKind.INTEGER]
Int64 = Annotated[int, ValueKind.LONG]


class FieldBinding(NamedTuple):
    name: str
    kind: ValueKind
    getter: Callable[[Any], Any]
    setter: Callable[[Any, Any], None]


def field(name: str, kind: ValueKind, attr: str | None = None) -> FieldBinding:
    """Build a FieldBinding reading/writing attribute *attr* (defaults to *name*)."""
    target = attr or name

    def _set(obj: Any, value: Any) -> None:
        setattr(obj, target, value)

    return FieldBinding(name, kind, lambda obj: getattr(obj, target), _set)


def kind_for(annotation: Any) -> ValueKind | None:
    """Map a type annotation to its ValueKind, or None when unsupported."""
    if typing.get_origin(annotation) is Annotated:
        for meta in annotation.__metadata__:
            if isinstance(meta, ValueKind):
                return meta
        annotation = typing.get_args(annotation)[0]

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            return None
        return kind_for(args[0])

    if annotation is bool:
        return ValueKind.BOOLEAN
    if annotation is int:
        return ValueKind.LONG
    if annotation is float:
        return ValueKind.DOUBLE
    if annotation is str:
        return ValueKind.STRING
    if annotation is datetime:
        return ValueKind.TIMESTAMP

    base = origin or annotation
    if isinstance(base, type) and issubclass(base, Mapping):
        return ValueKind.MAPPING
    return None


def _declared_fields(cls: type) -> list[tuple[str, str, Any]]:
    """(external name, attribute name, annotation) in declaration order."""
    model_fields = getattr(cls, "model_fields", None)
    if isinstance(model_fields, dict):
        out = []
        for attr, info in model_fields.items():
            annotation = info.annotation
            if info.metadata:
                annotation = Annotated[(annotation, *info.metadata)]
            out.append((info.alias or attr, attr, annotation))
        return out
    if dataclasses.is_dataclass(cls):
        hints = typing.get_type_hints(cls, include_extras=True)
        return [
            (f.metadata.get("name", f.name), f.name, hints.get(f.name))
            for f in dataclasses.fields(cls)
        ]
    return []


@functools.cache
def describe(cls: type) -> tuple[FieldBinding, ...]:
    """Return the ordered field bindings of *cls*."""
    custom = getattr(cls, "__describe__", None)
    if callable(custom):
        return tuple(custom())

    bindings: list[FieldBinding] = []
    for name, attr, annotation in _declared_fields(cls):
        kind = kind_for(annotation)
        if kind is None:
            continue
        bindings.append(field(name, kind, attr))
    return tuple(bindings)
