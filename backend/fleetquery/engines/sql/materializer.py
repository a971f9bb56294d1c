"""
Result materializer: cursor rows into new instances of a target type.

The binding plan (described fields of the target that have a matching
column, case-insensitive, first column wins) is built once per call, then
applied to every row. Column values are converted the way JDBC getters do:
NULL numbers and booleans read as zero/False, NULL text as None, and NULL
timestamps or mappings leave the field at its default.
"""

from collections.abc import Callable
from datetime import date, datetime
from typing import Any, NamedTuple, TypeVar

from fleetquery.core.codec import MappingCodec
from fleetquery.core.mapping import FieldBinding, ValueKind, describe
from fleetquery.engines.sql.errors import FieldErrorPolicy, MaterializeError, report_field_error

T = TypeVar("T")

_SKIP: Any = object()


def _to_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Cannot read {type(value).__name__} as timestamp")


def _to_boolean(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big") != 0
    return bool(value)


def _to_string(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode()
    return str(value)


_READERS: dict[ValueKind, tuple[Any, Callable[[Any], Any]]] = {
    ValueKind.BOOLEAN: (False, _to_boolean),
    ValueKind.INTEGER: (0, int),
    ValueKind.LONG: (0, int),
    ValueKind.DOUBLE: (0.0, float),
    ValueKind.STRING: (None, _to_string),
    ValueKind.TIMESTAMP: (_SKIP, _to_timestamp),
}


class PlanEntry(NamedTuple):
    binding: FieldBinding
    column: int


def column_labels(cursor: Any) -> list[str]:
    return [d[0] for d in cursor.description or ()]


def build_plan(target: type, labels: list[str]) -> list[PlanEntry]:
    """Described fields of *target* that have a column, in declaration order."""
    positions: dict[str, int] = {}
    for i, label in enumerate(labels):
        positions.setdefault(label.lower(), i)
    plan = []
    for binding in describe(target):
        column = positions.get(binding.name.lower())
        if column is not None:
            plan.append(PlanEntry(binding, column))
    return plan


class Materializer:
    """Applies a binding plan to cursor rows."""

    def __init__(self, codec: MappingCodec, policy: FieldErrorPolicy) -> None:
        self._codec = codec
        self._policy = policy

    def materialize(self, target: type[T], cursor: Any) -> list[T]:
        plan = build_plan(target, column_labels(cursor))
        result: list[T] = []
        for row in cursor:
            try:
                obj = target()
            except Exception as e:
                raise MaterializeError(f"Cannot instantiate {target.__name__}: {e}") from e
            for entry in plan:
                self._apply(obj, entry, row[entry.column])
            result.append(obj)
        return result

    def _apply(self, obj: Any, entry: PlanEntry, raw: Any) -> None:
        binding = entry.binding
        try:
            value = self._read(binding.kind, raw)
            if value is _SKIP:
                return
            binding.setter(obj, value)
        except Exception as e:
            report_field_error(
                self._policy,
                f"Setting {type(obj).__name__}.{binding.name} failed",
                e,
            )

    def _read(self, kind: ValueKind, raw: Any) -> Any:
        if kind == ValueKind.MAPPING:
            if raw is None:
                return _SKIP
            return self._codec.loads(_to_string(raw))
        null_value, convert = _READERS[kind]
        if raw is None:
            return null_value
        return convert(raw)
