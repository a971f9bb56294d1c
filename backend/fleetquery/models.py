"""
Domain models bound by QueryBuilder.

Field aliases are camelCase (deviceId, eventCode, ...); the alias is the name
matched against template placeholders and result columns, case-insensitively.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleetquery.core.mapping import Int32


class ProductTypeEnum(str, Enum):
    """Supported database product types (postgres, mysql, sqlite)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class _Bindable(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Device(_Bindable):
    id: int = 0
    name: str | None = None
    unique_id: str | None = None
    status: str | None = None
    last_update: datetime | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class DeviceEvent(_Bindable):
    id: int = 0
    device_id: int = 0
    event_code: Int32 = 0
    position_id: int = 0
    time: datetime | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class UserDevice(_Bindable):
    user_id: int = 0
    device_id: int = 0
