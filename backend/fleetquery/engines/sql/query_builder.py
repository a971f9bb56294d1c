"""
QueryBuilder: named-placeholder statement, bound and executed once.

    events = (
        QueryBuilder.create(pool, "SELECT * FROM event WHERE deviceid = :deviceId")
        .set_long("deviceId", 7)
        .execute_query(DeviceEvent)
    )

A builder owns one connection and one cursor from create() until its
terminal call (execute_query, execute_query_single, execute_update) or
close(); both are released on every exit path. An empty or None template is
a no-op query that never touches the connection source.
"""

import re
from datetime import datetime
from typing import Any, Mapping, TypeVar

from fleetquery.core.codec import JsonCodec, MappingCodec
from fleetquery.core.mapping import ValueKind
from fleetquery.core.pool import ConnectionSource
from fleetquery.engines.sql.binder import ParameterBinder
from fleetquery.engines.sql.errors import FieldErrorPolicy, QueryClosedError
from fleetquery.engines.sql.materializer import Materializer
from fleetquery.engines.sql.parser import parse_template
from fleetquery.engines.sql.statement import BoundStatement
from fleetquery.models import ProductTypeEnum

T = TypeVar("T")


class QueryBuilder:
    def __init__(
        self,
        source: ConnectionSource,
        template: str | None,
        return_generated_keys: bool = False,
        *,
        codec: MappingCodec | None = None,
        policy: FieldErrorPolicy = FieldErrorPolicy.LENIENT,
    ) -> None:
        self._return_generated_keys = return_generated_keys
        self._codec = codec or JsonCodec()
        self._policy = policy
        self._statement: BoundStatement | None = None
        self._consumed = False
        if template and template.strip():
            parsed = parse_template(
                _with_key_returning(source, template.strip(), return_generated_keys),
                source.placeholder,
            )
            self._statement = BoundStatement.open(source, parsed)
        self._binder = ParameterBinder(self._statement, self._codec, self._policy)

    @classmethod
    def create(
        cls,
        source: ConnectionSource,
        template: str | None,
        return_generated_keys: bool = False,
        *,
        codec: MappingCodec | None = None,
        policy: FieldErrorPolicy = FieldErrorPolicy.LENIENT,
    ) -> "QueryBuilder":
        """Parse *template*, acquire a connection and open the cursor."""
        return cls(source, template, return_generated_keys, codec=codec, policy=policy)

    def __enter__(self) -> "QueryBuilder":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        if self._statement is None:
            return self._consumed
        return self._statement.closed

    def close(self) -> None:
        """Release the cursor and connection without executing."""
        self._consumed = True
        if self._statement is not None:
            self._statement.close()

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def set_boolean(self, name: str, value: bool | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.BOOLEAN, value)
        return self

    def set_integer(self, name: str, value: int | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.INTEGER, value)
        return self

    def set_long(self, name: str, value: int | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.LONG, value)
        return self

    def set_double(self, name: str, value: float | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.DOUBLE, value)
        return self

    def set_string(self, name: str, value: str | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.STRING, value)
        return self

    def set_date(self, name: str, value: datetime | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.TIMESTAMP, value)
        return self

    def set_mapping(self, name: str, value: Mapping[str, Any] | None) -> "QueryBuilder":
        self._binder.set(name, ValueKind.MAPPING, value)
        return self

    def set_object(self, source: Any) -> "QueryBuilder":
        self._binder.set_object(source)
        return self

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute_query(self, target: type[T]) -> list[T]:
        """Run the query; one new *target* per row."""
        statement = self._begin()
        if statement is None:
            return []
        with statement.guard():
            cursor = statement.execute()
            result = Materializer(self._codec, self._policy).materialize(target, cursor)
        statement.close()
        return result

    def execute_query_single(self, target: type[T]) -> T | None:
        """First object of execute_query(), or None when there are no rows."""
        result = self.execute_query(target)
        return result[0] if result else None

    def execute_update(self) -> int:
        """Run a command; return the first generated key when requested, else 0."""
        statement = self._begin()
        if statement is None:
            return 0
        key = 0
        with statement.guard():
            cursor = statement.execute()
            if self._return_generated_keys:
                key = _generated_key(cursor)
            statement.connection.commit()
        statement.close()
        return key

    def _begin(self) -> BoundStatement | None:
        if self.closed:
            raise QueryClosedError("Query has already been executed or closed")
        self._consumed = True
        return self._statement


def _generated_key(cursor: Any) -> int:
    """First column of a RETURNING row, else the driver's lastrowid."""
    if cursor.description:
        row = cursor.fetchone()
        if row is not None and row[0] is not None:
            return int(row[0])
        return 0
    return int(getattr(cursor, "lastrowid", None) or 0)


_INSERT = re.compile(r"\s*insert\b", re.IGNORECASE)
_RETURNING = re.compile(r"\breturning\b", re.IGNORECASE)


def _with_key_returning(source: ConnectionSource, template: str, wanted: bool) -> str:
    """
    Append ``RETURNING id`` to a PostgreSQL INSERT asked for its generated key.

    psycopg cursors have no lastrowid; the key only comes back as a result row.
    """
    if not wanted or getattr(source, "product_type", None) != ProductTypeEnum.POSTGRES:
        return template
    if not _INSERT.match(template) or _RETURNING.search(template):
        return template
    return f"{template.rstrip(';').rstrip()} RETURNING id"
