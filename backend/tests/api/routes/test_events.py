"""Tests for /api/v1/events."""

from datetime import datetime
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from fleetquery.api.deps import get_connection_source
from fleetquery.core.config import settings
from fleetquery.core.data_manager import DataManager
from fleetquery.main import app
from fleetquery.models import DeviceEvent

URL = f"{settings.API_V1_STR}/events"
WINDOW = {"from": "2024-05-01T00:00:00", "to": "2024-05-02T00:00:00"}


def _seed(data_manager: DataManager) -> None:
    data_manager.link_device(1, 7)
    data_manager.link_device(1, 8)
    data_manager.link_device(2, 9)
    for device_id, code, hour in [(7, 100, 12), (7, 101, 9), (8, 100, 10), (9, 100, 8), (7, 100, 6)]:
        data_manager.add_event(
            DeviceEvent(
                device_id=device_id,
                event_code=code,
                time=datetime(2024, 5, 1, hour),
                attributes={"hour": hour},
            )
        )


def _hours(r) -> list[int]:
    return [int(e["time"][11:13]) for e in r.json()]


def test_requires_bearer_token(client: TestClient) -> None:
    r = client.get(URL, params=WINDOW)
    assert r.status_code in (401, 403)


def test_rejects_invalid_token(client: TestClient) -> None:
    r = client.get(URL, params=WINDOW, headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 403
    assert r.json()["detail"] == "Could not validate credentials"


def test_all_devices_all_codes_sorted(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 0, "eventCode": 0, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 200
    assert _hours(r) == [6, 9, 10, 12]
    first = r.json()[0]
    assert first["deviceId"] == 7
    assert first["eventCode"] == 100
    assert first["attributes"] == {"hour": 6}
    assert "device_id" not in first


def test_defaults_query_every_permitted_device(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params=WINDOW, headers=user_token_headers)
    assert r.status_code == 200
    assert {e["deviceId"] for e in r.json()} == {7, 8}


def test_all_devices_single_code(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"eventCode": 100, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 200
    assert _hours(r) == [6, 10, 12]


def test_single_device_single_code(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 7, "eventCode": 101, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 200
    assert [(e["deviceId"], e["eventCode"]) for e in r.json()] == [(7, 101)]


def test_single_device_all_codes(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 7, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 200
    assert _hours(r) == [6, 9, 12]


def test_forbidden_device(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    for code in (0, 100):
        r = client.get(URL, params={"deviceId": 9, "eventCode": code, **WINDOW}, headers=user_token_headers)
        assert r.status_code == 403
        assert "9" in r.json()["detail"]


def test_unknown_event_code_is_empty(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 7, "eventCode": 555, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 200
    assert r.json() == []


def test_missing_dates_are_empty(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 7}, headers=user_token_headers)
    assert r.status_code == 200
    assert r.json() == []


def test_invalid_date(client: TestClient, user_token_headers: dict[str, str]) -> None:
    r = client.get(URL, params={"from": "yesterday"}, headers=user_token_headers)
    assert r.status_code == 400
    assert "yesterday" in r.json()["detail"]


def test_event_code_out_of_range(
    client: TestClient, data_manager: DataManager, user_token_headers: dict[str, str]
) -> None:
    _seed(data_manager)
    r = client.get(URL, params={"deviceId": 7, "eventCode": 2**40, **WINDOW}, headers=user_token_headers)
    assert r.status_code == 400
    assert "eventCode" in r.json()["detail"]


def test_non_numeric_device_id(client: TestClient, user_token_headers: dict[str, str]) -> None:
    r = client.get(URL, params={"deviceId": "seven"}, headers=user_token_headers)
    assert r.status_code == 422
    assert "deviceId" in r.json()["detail"]


def test_database_failure_is_500(user_token_headers: dict[str, str]) -> None:
    source = MagicMock()
    source.placeholder = "?"
    source.acquire.side_effect = RuntimeError("database down")
    app.dependency_overrides[get_connection_source] = lambda: source
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.get(URL, params=WINDOW, headers=user_token_headers)
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json()["detail"].startswith("Internal server error")
