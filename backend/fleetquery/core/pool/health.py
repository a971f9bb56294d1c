"""
Liveness ping for pooled connections.
"""

import logging
from typing import Any

_log = logging.getLogger(__name__)

PING_SQL = "SELECT 1"


def health_check(conn: Any) -> bool:
    """True when *conn* answers PING_SQL; any driver error means the connection is dead."""
    try:
        cur = conn.cursor()
    except Exception:
        _log.debug("Cannot open cursor on pooled connection", exc_info=True)
        return False
    try:
        cur.execute(PING_SQL)
        return cur.fetchone() is not None
    except Exception:
        _log.debug("Ping failed", exc_info=True)
        return False
    finally:
        try:
            cur.close()
        except Exception:
            _log.debug("Cursor close after ping failed", exc_info=True)
