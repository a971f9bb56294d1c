"""
Driver connections for the pool's datasource.

sqlite3 for file databases, psycopg for PostgreSQL, pymysql for MySQL. The
datasource is a dict or any object exposing product_type, host, port,
database, username and password.
"""

import sqlite3
from collections.abc import Callable
from datetime import datetime
from typing import Any

import psycopg
import pymysql

from fleetquery.core.config import settings
from fleetquery.models import ProductTypeEnum

# Positional marker of each driver's paramstyle (qmark or format).
PLACEHOLDERS: dict[ProductTypeEnum, str] = {
    ProductTypeEnum.POSTGRES: "%s",
    ProductTypeEnum.MYSQL: "%s",
    ProductTypeEnum.SQLITE: "?",
}

DEFAULT_PORTS = {
    ProductTypeEnum.POSTGRES: 5432,
    ProductTypeEnum.MYSQL: 3306,
}

sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))


def _get(datasource: Any, key: str) -> Any:
    if isinstance(datasource, dict):
        return datasource.get(key)
    return getattr(datasource, key, None)


def resolve_product_type(
    datasource: Any, product_type: ProductTypeEnum | None = None
) -> ProductTypeEnum:
    pt = product_type or _get(datasource, "product_type")
    if pt is None:
        raise ValueError("product_type is required (from datasource or argument)")
    return ProductTypeEnum(pt)


def placeholder_for(product_type: ProductTypeEnum) -> str:
    return PLACEHOLDERS[product_type]


def _server_params(datasource: Any, pt: ProductTypeEnum) -> dict[str, Any]:
    """host/port/user/password shared by the network drivers."""
    params = {
        "host": _get(datasource, "host"),
        "port": int(_get(datasource, "port") or DEFAULT_PORTS[pt]),
        "user": _get(datasource, "username"),
        "password": _get(datasource, "password") or "",
        "connect_timeout": settings.DATABASE_CONNECT_TIMEOUT,
    }
    if params["host"] is None:
        raise ValueError("datasource must provide host")
    if params["user"] is None:
        raise ValueError("datasource must provide username")
    return params


def _connect_sqlite(datasource: Any, database: str) -> Any:
    return sqlite3.connect(
        database,
        timeout=settings.DATABASE_CONNECT_TIMEOUT,
        check_same_thread=False,
    )


def _connect_postgres(datasource: Any, database: str) -> Any:
    return psycopg.connect(dbname=database, **_server_params(datasource, ProductTypeEnum.POSTGRES))


def _connect_mysql(datasource: Any, database: str) -> Any:
    return pymysql.connect(database=database, **_server_params(datasource, ProductTypeEnum.MYSQL))


_CONNECTORS: dict[ProductTypeEnum, Callable[[Any, str], Any]] = {
    ProductTypeEnum.SQLITE: _connect_sqlite,
    ProductTypeEnum.POSTGRES: _connect_postgres,
    ProductTypeEnum.MYSQL: _connect_mysql,
}


def connect(
    datasource: Any,
    *,
    product_type: ProductTypeEnum | None = None,
) -> Any:
    """
    Open a DB-API connection.

    For sqlite, ``database`` is the file path (or ``:memory:``); for the
    servers it is the database name.
    """
    pt = resolve_product_type(datasource, product_type)
    database = _get(datasource, "database")
    if database is None:
        raise ValueError("datasource must provide database")
    return _CONNECTORS[pt](datasource, database)
