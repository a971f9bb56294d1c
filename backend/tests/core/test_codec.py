"""Unit tests for core.codec: JSON and XML mapping codecs."""

from datetime import datetime

import pytest

from fleetquery.core.codec import CodecError, JsonCodec, XmlCodec, get_codec


def test_get_codec() -> None:
    assert isinstance(get_codec(False), JsonCodec)
    assert isinstance(get_codec(True), XmlCodec)


class TestJsonCodec:
    def test_dumps(self):
        out = JsonCodec().dumps({"name": "Łódź", "at": datetime(2024, 5, 1, 10, 0)})
        assert out == '{"name": "Łódź", "at": "2024-05-01T10:00:00"}'

    def test_loads(self):
        assert JsonCodec().loads('{"a": 1, "b": {"c": true}}') == {"a": 1, "b": {"c": True}}

    @pytest.mark.parametrize("text", ["{bad", "[1, 2]", '"text"', ""])
    def test_loads_rejects_non_objects(self, text):
        with pytest.raises(CodecError):
            JsonCodec().loads(text)

    def test_dumps_unserializable(self):
        with pytest.raises(CodecError):
            JsonCodec().dumps({"x": object()})

    def test_codec_error_is_value_error(self):
        with pytest.raises(ValueError):
            JsonCodec().loads("{bad")


class TestXmlCodec:
    def test_dumps(self):
        out = XmlCodec().dumps({"ignition": False, "speed": 12.5, "driver": {"name": "Ann"}, "note": None})
        assert out == (
            "<info><ignition>false</ignition><speed>12.5</speed>"
            "<driver><name>Ann</name></driver><note /></info>"
        )

    def test_loads_reads_text_values(self):
        text = "<info><speed>12.5</speed><driver><name>Ann</name></driver><note/></info>"
        assert XmlCodec().loads(text) == {"speed": "12.5", "driver": {"name": "Ann"}, "note": ""}

    def test_escapes_text(self):
        codec = XmlCodec()
        text = codec.dumps({"memo": "a < b & c"})
        assert "&lt;" in text
        assert codec.loads(text) == {"memo": "a < b & c"}

    def test_invalid_key(self):
        with pytest.raises(CodecError, match="not a valid element name"):
            XmlCodec().dumps({"bad key": 1})

    def test_invalid_document(self):
        with pytest.raises(CodecError):
            XmlCodec().loads("<info><open></info>")
