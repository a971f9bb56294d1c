"""
Checks behind the /utils probes.

Each returns ``(ok, failed check names)``.
"""

import logging

from fleetquery.core.pool import ConnectionSource, health_check

_log = logging.getLogger(__name__)


def check_database(source: ConnectionSource) -> bool:
    try:
        conn = source.acquire()
    except Exception:
        _log.warning("Cannot acquire a database connection", exc_info=True)
        return False
    try:
        return health_check(conn)
    finally:
        source.release(conn)


def liveness_check() -> tuple[bool, list[str]]:
    """No I/O: answering at all means the process is alive."""
    return True, []


def readiness_check(source: ConnectionSource) -> tuple[bool, list[str]]:
    failures = [] if check_database(source) else ["database"]
    return not failures, failures
