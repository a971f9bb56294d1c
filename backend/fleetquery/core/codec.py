"""
Text codecs for mapping-valued fields (JSON or XML).

A codec turns a plain key-value mapping into column text and back. The
data-access layer picks one with settings.DATABASE_XML and passes it to every
QueryBuilder it creates.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol


class CodecError(ValueError):
    """Raised when a mapping cannot be encoded or a payload cannot be decoded."""

    pass


class MappingCodec(Protocol):
    def dumps(self, value: Mapping[str, Any]) -> str: ...

    def loads(self, text: str) -> dict[str, Any]: ...


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonCodec:
    """JSON object text."""

    def dumps(self, value: Mapping[str, Any]) -> str:
        try:
            return json.dumps(dict(value), ensure_ascii=False, default=_default)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode mapping as JSON: {e}") from e

    def loads(self, text: str) -> dict[str, Any]:
        try:
            out = json.loads(text)
        except json.JSONDecodeError as e:
            raise CodecError(f"Invalid JSON object: {e}") from e
        if not isinstance(out, dict):
            raise CodecError("JSON is not an object")
        return out


class XmlCodec:
    """
    ``<info><key>value</key>...</info>`` text.

    Scalars are written with str() (booleans as true/false) and read back as
    strings; nested mappings become nested elements.
    """

    root_tag = "info"

    def dumps(self, value: Mapping[str, Any]) -> str:
        root = ET.Element(self.root_tag)
        try:
            self._fill(root, value)
        except ValueError as e:
            raise CodecError(f"Cannot encode mapping as XML: {e}") from e
        return ET.tostring(root, encoding="unicode")

    def loads(self, text: str) -> dict[str, Any]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise CodecError(f"Invalid XML document: {e}") from e
        return self._read(root)

    def _fill(self, parent: ET.Element, value: Mapping[str, Any]) -> None:
        for key, item in value.items():
            key = str(key)
            if not key.isidentifier():
                raise ValueError(f"key {key!r} is not a valid element name")
            child = ET.SubElement(parent, key)
            if isinstance(item, Mapping):
                self._fill(child, item)
            elif isinstance(item, bool):
                child.text = "true" if item else "false"
            elif isinstance(item, datetime):
                child.text = item.isoformat()
            elif item is not None:
                child.text = str(item)

    def _read(self, element: ET.Element) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for child in element:
            if len(child):
                out[child.tag] = self._read(child)
            else:
                out[child.tag] = child.text or ""
        return out


def get_codec(xml: bool) -> MappingCodec:
    """Codec selected by the DATABASE_XML switch."""
    return XmlCodec() if xml else JsonCodec()
