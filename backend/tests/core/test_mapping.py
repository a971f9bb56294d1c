"""Unit tests for core.mapping: field description of bindable types."""

import dataclasses
from datetime import datetime
from typing import Any, Optional

import pytest
from pydantic import BaseModel

from fleetquery.core.mapping import Int32, Int64, ValueKind, describe, field, kind_for
from fleetquery.models import Device, DeviceEvent


@pytest.mark.parametrize(
    "annotation, kind",
    [
        (bool, ValueKind.BOOLEAN),
        (int, ValueKind.LONG),
        (Int32, ValueKind.INTEGER),
        (Int64, ValueKind.LONG),
        (float, ValueKind.DOUBLE),
        (str, ValueKind.STRING),
        (datetime, ValueKind.TIMESTAMP),
        (dict[str, Any], ValueKind.MAPPING),
        (Optional[str], ValueKind.STRING),
        (datetime | None, ValueKind.TIMESTAMP),
        (Int32 | None, ValueKind.INTEGER),
        (list[int], None),
        (bytes, None),
        (int | str, None),
    ],
)
def test_kind_for(annotation: Any, kind: ValueKind | None) -> None:
    assert kind_for(annotation) == kind


def test_describe_pydantic_model_uses_aliases() -> None:
    names = [(b.name, b.kind) for b in describe(DeviceEvent)]
    assert names == [
        ("id", ValueKind.LONG),
        ("deviceId", ValueKind.LONG),
        ("eventCode", ValueKind.INTEGER),
        ("positionId", ValueKind.LONG),
        ("time", ValueKind.TIMESTAMP),
        ("attributes", ValueKind.MAPPING),
    ]


def test_getter_and_setter_use_attribute_name() -> None:
    binding = {b.name: b for b in describe(Device)}["uniqueId"]
    device = Device(unique_id="T1")
    assert binding.getter(device) == "T1"
    binding.setter(device, "T2")
    assert device.unique_id == "T2"


def test_describe_is_cached() -> None:
    assert describe(Device) is describe(Device)


def test_describe_dataclass() -> None:
    @dataclasses.dataclass
    class Sample:
        label: str = ""
        hits: int = dataclasses.field(default=0, metadata={"name": "hitCount"})
        blob: bytes = b""

    assert [(b.name, b.kind) for b in describe(Sample)] == [
        ("label", ValueKind.STRING),
        ("hitCount", ValueKind.LONG),
    ]


def test_explicit_description_wins() -> None:
    class Custom(BaseModel):
        value: str = ""

        @classmethod
        def __describe__(cls):
            return [field("v", ValueKind.STRING, "value")]

    [binding] = describe(Custom)
    assert binding.name == "v"
    assert binding.getter(Custom(value="x")) == "x"


def test_plain_class_has_no_fields() -> None:
    class Plain:
        x = 1

    assert describe(Plain) == ()
