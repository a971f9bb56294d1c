"""
DB connection and connection pool for the configured datasource.

No driver layer: psycopg and pymysql are installed via pip, sqlite3 ships with Python.
"""

from .connect import connect, placeholder_for
from .health import health_check
from .manager import ConnectionPool, ConnectionSource, get_pool

__all__ = [
    "connect",
    "placeholder_for",
    "health_check",
    "ConnectionPool",
    "ConnectionSource",
    "get_pool",
]
