"""
Parameter binder: typed values into placeholder slots.

Checks each value against its kind before it reaches the driver (the DB-API
has no typed setters) and writes it to every position recorded for the
placeholder name. set_object() binds the described fields of any object whose
names match a placeholder.
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from fleetquery.core.codec import CodecError, MappingCodec
from fleetquery.core.mapping import ValueKind, describe
from fleetquery.engines.sql.errors import BindError, FieldErrorPolicy, report_field_error
from fleetquery.engines.sql.statement import BoundStatement

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1


def _check_boolean(value: Any) -> bool:
    if not isinstance(value, bool):
        raise BindError(f"Expected boolean, got {type(value).__name__}")
    return value


def _check_int(value: Any, low: int, high: int, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise BindError(f"Expected {label}, got {type(value).__name__}")
    if not low <= value <= high:
        raise BindError(f"Value {value} out of {label} range")
    return value


def _check_integer(value: Any) -> int:
    return _check_int(value, INT32_MIN, INT32_MAX, "32-bit integer")


def _check_long(value: Any) -> int:
    return _check_int(value, INT64_MIN, INT64_MAX, "64-bit integer")


def _check_double(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BindError(f"Expected number, got {type(value).__name__}")
    return float(value)


def _check_string(value: Any) -> str:
    if not isinstance(value, str):
        raise BindError(f"Expected string, got {type(value).__name__}")
    return value


def _check_timestamp(value: Any) -> datetime:
    if not isinstance(value, datetime):
        raise BindError(f"Expected datetime, got {type(value).__name__}")
    return value


_CHECKERS: dict[ValueKind, Callable[[Any], Any]] = {
    ValueKind.BOOLEAN: _check_boolean,
    ValueKind.INTEGER: _check_integer,
    ValueKind.LONG: _check_long,
    ValueKind.DOUBLE: _check_double,
    ValueKind.STRING: _check_string,
    ValueKind.TIMESTAMP: _check_timestamp,
}


class ParameterBinder:
    """Binds values by placeholder name onto one BoundStatement."""

    def __init__(
        self,
        statement: BoundStatement | None,
        codec: MappingCodec,
        policy: FieldErrorPolicy,
    ) -> None:
        self._statement = statement
        self._codec = codec
        self._policy = policy

    def positions(self, name: str) -> tuple[int, ...]:
        if self._statement is None:
            return ()
        return self._statement.parsed.indexes.get(name.lower(), ())

    def set(self, name: str, kind: ValueKind, value: Any) -> None:
        """
        Bind *value* to every position of *name*; None binds SQL NULL.

        Unknown names are ignored. A rejected value closes the statement and
        raises BindError.
        """
        positions = self.positions(name)
        if not positions:
            return
        assert self._statement is not None
        with self._statement.guard():
            self._statement.bind(positions, self._convert(name, kind, value))

    def set_object(self, source: Any) -> None:
        """Bind every described field of *source* whose name is a placeholder."""
        for binding in describe(type(source)):
            if not self.positions(binding.name):
                continue
            try:
                value = binding.getter(source)
                if binding.kind == ValueKind.MAPPING and value is not None:
                    value = self._codec.dumps(value)
            except Exception as e:
                assert self._statement is not None
                with self._statement.guard():
                    report_field_error(
                        self._policy,
                        f"Reading {type(source).__name__}.{binding.name} failed",
                        e,
                    )
                continue
            kind = ValueKind.STRING if binding.kind == ValueKind.MAPPING else binding.kind
            self.set(binding.name, kind, value)

    def _convert(self, name: str, kind: ValueKind, value: Any) -> Any:
        if value is None:
            return None
        if kind == ValueKind.MAPPING:
            if not isinstance(value, Mapping):
                raise BindError(f"Parameter '{name}' expected mapping, got {type(value).__name__}")
            try:
                return self._codec.dumps(value)
            except CodecError as e:
                raise BindError(f"Parameter '{name}' {e}") from e
        try:
            return _CHECKERS[kind](value)
        except BindError as e:
            raise BindError(f"Parameter '{name}': {e}") from e
