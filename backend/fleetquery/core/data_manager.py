"""
Data manager: event and device-permission queries over QueryBuilder.

Holds the connection source, the mapping codec (settings.DATABASE_XML) and
the field error policy (settings.DATABASE_STRICT_FIELDS), and passes them to
every builder it creates.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fleetquery.core.codec import MappingCodec, get_codec
from fleetquery.core.config import Settings, settings as default_settings
from fleetquery.core.pool import ConnectionSource
from fleetquery.engines.sql import FieldErrorPolicy, QueryBuilder
from fleetquery.models import DeviceEvent, UserDevice

_log = logging.getLogger(__name__)

SELECT_EVENTS = (
    "SELECT * FROM device_event"
    " WHERE deviceId = :deviceId AND eventCode = :eventCode"
    " AND time BETWEEN :from AND :to"
    " ORDER BY time"
)

INSERT_EVENT = (
    "INSERT INTO device_event (deviceId, eventCode, positionId, time, attributes)"
    " VALUES (:deviceId, :eventCode, :positionId, :time, :attributes)"
)

SELECT_USER_DEVICES = "SELECT userId, deviceId FROM user_device WHERE userId = :userId"


class DataManager:
    def __init__(
        self,
        source: ConnectionSource,
        *,
        codec: MappingCodec | None = None,
        policy: FieldErrorPolicy = FieldErrorPolicy.LENIENT,
    ) -> None:
        self.source = source
        self.codec = codec or get_codec(False)
        self.policy = policy

    @classmethod
    def from_settings(
        cls, source: ConnectionSource, config: Settings | None = None
    ) -> DataManager:
        config = config or default_settings
        policy = (
            FieldErrorPolicy.STRICT
            if config.DATABASE_STRICT_FIELDS
            else FieldErrorPolicy.LENIENT
        )
        return cls(source, codec=get_codec(config.DATABASE_XML), policy=policy)

    def query(self, template: str | None, return_generated_keys: bool = False) -> QueryBuilder:
        """New single-use builder on this manager's source, codec and policy."""
        return QueryBuilder.create(
            self.source,
            template,
            return_generated_keys,
            codec=self.codec,
            policy=self.policy,
        )

    def get_events(
        self,
        device_id: int,
        event_code: int,
        start: datetime | None,
        end: datetime | None,
    ) -> list[DeviceEvent]:
        """Events of one type for one device between *start* and *end* (NULL bounds match nothing)."""
        return (
            self.query(SELECT_EVENTS)
            .set_long("deviceId", device_id)
            .set_integer("eventCode", event_code)
            .set_date("from", start)
            .set_date("to", end)
            .execute_query(DeviceEvent)
        )

    def add_event(self, event: DeviceEvent) -> int:
        """Insert *event*; returns and assigns the generated id."""
        event.id = self.query(INSERT_EVENT, return_generated_keys=True).set_object(event).execute_update()
        _log.debug("Added event %s for device %s", event.id, event.device_id)
        return event.id

    def get_device_permissions(self, user_id: int) -> set[int]:
        links = self.query(SELECT_USER_DEVICES).set_long("userId", user_id).execute_query(UserDevice)
        return {link.device_id for link in links}

    def link_device(self, user_id: int, device_id: int) -> int:
        return (
            self.query("INSERT INTO user_device (userId, deviceId) VALUES (:userId, :deviceId)")
            .set_object(UserDevice(user_id=user_id, device_id=device_id))
            .execute_update()
        )
