"""
Connection pool for the configured datasource.

ConnectionPool is the connection source handed to QueryBuilder: acquire()
returns a healthy connection (idle or freshly opened), release() rolls it
back and keeps it for reuse, or closes it when the pool is full. Includes
health-check on checkout, max-age eviction, and thread-safe singleton
initialisation.
"""

import logging
import threading
import time
from typing import Any, NamedTuple, Protocol

from fleetquery.core.config import settings
from fleetquery.models import ProductTypeEnum

from .connect import connect, placeholder_for, resolve_product_type
from .health import health_check

_log = logging.getLogger(__name__)

_PING_IDLE_THRESHOLD = 30.0  # only ping connections idle longer than this (seconds)


class ConnectionSource(Protocol):
    """Supplies one DB-API connection per acquire(); takes it back on release()."""

    placeholder: str
    product_type: ProductTypeEnum

    def acquire(self) -> Any: ...

    def release(self, conn: Any) -> None: ...


class _PoolEntry(NamedTuple):
    conn: Any
    created_at: float  # time.monotonic() when the connection was opened
    last_used: float  # time.monotonic() when last returned to pool


class ConnectionPool:
    """Connection pool for one datasource with health-check and max-age."""

    def __init__(
        self,
        datasource: Any,
        *,
        pool_size: int | None = None,
        max_age: float | None = None,
    ) -> None:
        self.datasource = datasource
        self.product_type = resolve_product_type(datasource)
        self.placeholder = placeholder_for(self.product_type)
        self._idle: list[_PoolEntry] = []
        self._created: dict[int, float] = {}
        self._lock = threading.Lock()
        self._pool_size = (
            pool_size if pool_size is not None else settings.DATABASE_POOL_SIZE
        )
        self._max_age = float(
            max_age if max_age is not None else settings.DATABASE_POOL_MAX_AGE_SEC
        )

    def acquire(self) -> Any:
        """Get a healthy connection (from pool or freshly opened)."""
        now = time.monotonic()
        while True:
            entry = self._pop()
            if entry is None:
                break
            if self._is_expired(entry):
                self._discard(entry.conn)
                continue
            idle_sec = now - entry.last_used
            if idle_sec > _PING_IDLE_THRESHOLD and not health_check(entry.conn):
                self._discard(entry.conn)
                continue
            return entry.conn

        conn = connect(self.datasource)
        with self._lock:
            self._created[id(conn)] = time.monotonic()
        _log.debug("Opened %s connection", self.product_type.value)
        return conn

    def release(self, conn: Any) -> None:
        """Return a connection to the pool (or close it if pool is full)."""
        try:
            conn.rollback()
        except Exception:
            _log.warning("Rollback failed on release, closing connection", exc_info=True)
            self._discard(conn)
            return

        with self._lock:
            if len(self._idle) < self._pool_size:
                created_at = self._created.get(id(conn), time.monotonic())
                self._idle.append(
                    _PoolEntry(conn=conn, created_at=created_at, last_used=time.monotonic())
                )
                return

        self._discard(conn)

    def dispose(self) -> None:
        """Close every idle connection."""
        with self._lock:
            entries = list(self._idle)
            self._idle.clear()
        for e in entries:
            self._discard(e.conn)

    def stats(self) -> dict[str, int]:
        """Return pool statistics for monitoring."""
        with self._lock:
            return {
                "idle_connections": len(self._idle),
                "open_connections": len(self._created),
            }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _pop(self) -> _PoolEntry | None:
        with self._lock:
            if self._idle:
                return self._idle.pop()
        return None

    def _is_expired(self, entry: _PoolEntry) -> bool:
        return (time.monotonic() - entry.created_at) > self._max_age

    def _discard(self, conn: Any) -> None:
        with self._lock:
            self._created.pop(id(conn), None)
        self._close_quiet(conn)

    @staticmethod
    def _close_quiet(conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            pass


_pool: ConnectionPool | None = None
_pool_lock = threading.Lock()


def get_pool() -> ConnectionPool:
    """Return the singleton ConnectionPool for settings.datasource (double-checked locking)."""
    global _pool
    if _pool is None:
        with _pool_lock:
            if _pool is None:
                _pool = ConnectionPool(settings.datasource)
    return _pool
