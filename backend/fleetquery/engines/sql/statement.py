"""
Statement lifecycle: one connection and one cursor owned by one QueryBuilder.

BoundStatement.open() acquires the connection and opens the cursor
atomically. guard() is the scoped-acquisition block every fallible step runs
in: on any exception the cursor is closed, then the connection released,
then the exception propagates. close() is idempotent.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from fleetquery.core.pool import ConnectionSource
from fleetquery.engines.sql.errors import BindError, QueryClosedError
from fleetquery.engines.sql.parser import ParsedTemplate

_log = logging.getLogger(__name__)

UNSET: Any = object()


class BoundStatement:
    """Positional parameter slots plus the cursor/connection they will run on."""

    def __init__(self, source: ConnectionSource, conn: Any, cursor: Any, parsed: ParsedTemplate) -> None:
        self._source = source
        self._conn = conn
        self.cursor = cursor
        self.parsed = parsed
        self.params: list[Any] = [UNSET] * parsed.count
        self.closed = False

    @classmethod
    def open(cls, source: ConnectionSource, parsed: ParsedTemplate) -> "BoundStatement":
        conn = source.acquire()
        try:
            cursor = conn.cursor()
        except BaseException:
            source.release(conn)
            raise
        return cls(source, conn, cursor, parsed)

    @property
    def connection(self) -> Any:
        return self._conn

    @contextmanager
    def guard(self) -> Iterator[None]:
        """Release cursor and connection if the block raises."""
        if self.closed:
            raise QueryClosedError("Query has already been executed or closed")
        try:
            yield
        except BaseException:
            self.close()
            raise

    def bind(self, positions: Sequence[int], value: Any) -> None:
        for pos in positions:
            self.params[pos - 1] = value

    def execute(self) -> Any:
        """Run the statement with the bound slots; returns the cursor."""
        unbound = self._unbound_names()
        if unbound:
            raise BindError(f"Unbound placeholders: {', '.join(unbound)}")
        _log.debug("Executing SQL: %s", self.parsed.sql)
        # Always pass a sequence so format-style drivers unescape "%%".
        self.cursor.execute(self.parsed.sql, list(self.params))
        return self.cursor

    def close(self) -> None:
        """Close the cursor, then release the connection. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        try:
            self.cursor.close()
        except Exception:
            _log.warning("Cursor close failed", exc_info=True)
        finally:
            self._source.release(self._conn)

    def _unbound_names(self) -> list[str]:
        missing = {i + 1 for i, v in enumerate(self.params) if v is UNSET}
        if not missing:
            return []
        return sorted(
            name
            for name, positions in self.parsed.indexes.items()
            if missing.intersection(positions)
        )
