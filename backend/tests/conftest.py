import sqlite3
from collections.abc import Generator
from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from fleetquery.api.deps import get_connection_source
from fleetquery.core.data_manager import DataManager
from fleetquery.core.pool import ConnectionPool
from fleetquery.core.security import create_access_token
from fleetquery.main import app
from fleetquery.models import ProductTypeEnum

SCHEMA = """
CREATE TABLE device (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT,
  uniqueId TEXT,
  status TEXT,
  lastUpdate TIMESTAMP,
  attributes TEXT
);
CREATE TABLE device_event (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  deviceId INTEGER NOT NULL,
  eventCode INTEGER NOT NULL,
  positionId INTEGER,
  time TIMESTAMP,
  attributes TEXT
);
CREATE TABLE user_device (
  userId INTEGER NOT NULL,
  deviceId INTEGER NOT NULL
);
"""


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    path = tmp_path / "fleetquery_test.db"
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture()
def pool(db_path: str) -> Generator[ConnectionPool, None, None]:
    p = ConnectionPool(
        {"product_type": ProductTypeEnum.SQLITE, "database": db_path},
        pool_size=2,
    )
    yield p
    p.dispose()


@pytest.fixture()
def data_manager(pool: ConnectionPool) -> DataManager:
    return DataManager(pool)


@pytest.fixture()
def mock_source() -> MagicMock:
    """Connection source double: acquire() -> conn, conn.cursor() -> cursor."""
    source = MagicMock()
    source.placeholder = "?"
    return source


@pytest.fixture()
def mock_cursor(mock_source: MagicMock) -> MagicMock:
    cursor = mock_source.acquire.return_value.cursor.return_value
    cursor.description = None
    return cursor


@pytest.fixture()
def client(pool: ConnectionPool) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_connection_source] = lambda: pool
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def user_token_headers() -> dict[str, str]:
    token = create_access_token(1, timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}
