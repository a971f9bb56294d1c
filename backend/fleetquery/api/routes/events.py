"""
Device events resource.

GET /events?eventCode=&deviceId=&from=&to=

- deviceId == 0: events of every device the user may access.
- eventCode == 0: every event type (EVENT_CODES), merged and sorted by time.
- deviceId != 0: permission-checked single device, for a single event type
  and for eventCode == 0 alike. Older tracking servers skipped the check in
  the eventCode == 0 case; here a foreign device is always a 403.

Unknown event codes simply produce an empty list.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from fleetquery.api.deps import CurrentUserId, DataManagerDep, PermissionsDep
from fleetquery.core.data_manager import DataManager
from fleetquery.core.permission import PermissionDeniedError
from fleetquery.models import DeviceEvent

router = APIRouter(prefix="/events", tags=["events"])

MIN_EVENT_CODE = 100
MAX_EVENT_CODE = 101
EVENT_CODES = range(MIN_EVENT_CODE, MAX_EVENT_CODE + 1)


def parse_date(value: str | None) -> datetime | None:
    """ISO-8601 timestamp, or None when absent."""
    if value is None or value == "":
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date: {value!r}",
        )


def _all_of_type(
    data_manager: DataManager,
    device_id: int,
    start: datetime | None,
    end: datetime | None,
) -> list[DeviceEvent]:
    events: list[DeviceEvent] = []
    for code in EVENT_CODES:
        events.extend(data_manager.get_events(device_id, code, start, end))
    return events


def _sorted(events: list[DeviceEvent]) -> list[DeviceEvent]:
    return sorted(events, key=lambda e: (e.time is not None, e.time))


@router.get("", response_model=list[DeviceEvent], response_model_by_alias=True)
def get_events(
    user_id: CurrentUserId,
    data_manager: DataManagerDep,
    permissions: PermissionsDep,
    event_code: int = Query(0, alias="eventCode"),
    device_id: int = Query(0, alias="deviceId"),
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
) -> list[DeviceEvent]:
    start, end = parse_date(from_), parse_date(to)

    if device_id == 0:
        events: list[DeviceEvent] = []
        for device in sorted(permissions.get_device_permissions(user_id)):
            if event_code == 0:
                events.extend(_all_of_type(data_manager, device, start, end))
            else:
                events.extend(data_manager.get_events(device, event_code, start, end))
        return _sorted(events)

    # Checked for eventCode == 0 as well.
    try:
        permissions.check_device(user_id, device_id)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if event_code == 0:
        return _sorted(_all_of_type(data_manager, device_id, start, end))
    return data_manager.get_events(device_id, event_code, start, end)
