"""Unit tests for NormalizedEvent serialization."""

import json
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from opcbridge.core.events import NormalizedEvent, ValueType


def _event(**overrides) -> NormalizedEvent:
    fields = {
        "id": "opcua~ns=2;i=1",
        "name": "OPC UA: Temp",
        "source": "opcua",
        "value_type": ValueType(name="Wert", unit="", type="Number"),
        "timestamp": 1700000000000,
        "value": [21.5],
        "meta": {"opcuaDataValue": {"dataType": "Double", "arrayType": "Scalar", "value": 21.5}},
    }
    fields.update(overrides)
    return NormalizedEvent(**fields)


class TestNormalizedEvent:
    """Tests for the wire document."""

    def test_to_dict_uses_wire_field_names(self) -> None:
        doc = _event().to_dict()

        assert doc == {
            "id": "opcua~ns=2;i=1",
            "name": "OPC UA: Temp",
            "user": "opcua",
            "meta": {"opcuaDataValue": {"dataType": "Double", "arrayType": "Scalar", "value": 21.5}},
            "valueTypes": [{"name": "Wert", "unit": "", "type": "Number"}],
            "values": [{"date": 1700000000000, "value": [21.5]}],
        }

    def test_to_json_bytes_is_one_utf8_document(self) -> None:
        payload = _event(name="OPC UA: Temperatur °C").to_json_bytes()

        assert isinstance(payload, bytes)
        assert json.loads(payload.decode("utf-8"))["name"] == "OPC UA: Temperatur °C"

    def test_datetime_values_encode_as_epoch_millis(self) -> None:
        ts = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        event = _event(
            value_type=ValueType(name="Wert", unit="Date", type="Number"),
            value=[ts],
            meta={"opcuaDataValue": {"value": ts}},
        )

        doc = json.loads(event.to_json_bytes())

        assert doc["values"][0]["value"] == [1700000000000]
        assert doc["meta"]["opcuaDataValue"]["value"] == 1700000000000

    def test_bytes_encode_as_base64(self) -> None:
        doc = json.loads(_event(value=[b"\x00\xff"]).to_json_bytes())
        assert doc["values"][0]["value"] == ["AP8="]

    def test_unknown_objects_encode_as_str(self) -> None:
        class Opaque:
            def __str__(self) -> str:
                return "opaque"

        doc = json.loads(_event(value=[Opaque()]).to_json_bytes())
        assert doc["values"][0]["value"] == ["opaque"]

    @pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_floats_encode_as_null(self, number: float) -> None:
        event = _event(
            value=[number],
            meta={"opcuaDataValue": {"dataType": "Double", "arrayType": "Array", "value": [1.0, number]}},
        )

        def reject_constant(token: str) -> None:
            raise ValueError(f"invalid JSON constant {token}")

        doc = json.loads(event.to_json_bytes(), parse_constant=reject_constant)

        assert doc["values"][0]["value"] == [None]
        assert doc["meta"]["opcuaDataValue"]["value"] == [1.0, None]

    def test_event_is_immutable(self) -> None:
        event = _event()
        with pytest.raises(FrozenInstanceError):
            event.id = "other"  # type: ignore[misc]
