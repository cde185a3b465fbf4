# tests/services/test_messages.py
"""
Тесты контрактов сообщений ретранслятора.
"""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from src.services.tracking_ws.messages import (
    JoinOrderRoom,
    LocationUpdate,
    RelayEnvelope,
    RelayEvent,
    UpdateLocation,
    build_envelope,
    parse_envelope,
)


class TestEnvelope:
    """Тесты конверта {event, data}."""

    def test_parse_text(self) -> None:
        envelope = parse_envelope('{"event": "joinOrderRoom", "data": {"orderId": "42"}}')

        assert envelope.event == "joinOrderRoom"
        assert envelope.data == {"orderId": "42"}

    def test_parse_bytes(self) -> None:
        envelope = parse_envelope(b'{"event": "joinOrderRoom", "data": {"orderId": "42"}}')
        assert envelope.event == RelayEvent.JOIN_ORDER_ROOM.value

    def test_missing_data_is_empty(self) -> None:
        assert parse_envelope('{"event": "x"}').data == {}
        assert parse_envelope('{"event": "x", "data": null}').data == {}

    @pytest.mark.parametrize("raw", ["not json", "", "{\"event\": "])
    def test_invalid_json(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_envelope(raw)

    @pytest.mark.parametrize(
        "raw",
        ['[1, 2]', '"text"', '{"data": {}}', '{"event": "x", "data": "str"}'],
    )
    def test_not_an_envelope(self, raw: str) -> None:
        with pytest.raises(ValidationError):
            parse_envelope(raw)

    def test_build_envelope(self) -> None:
        message = build_envelope(
            RelayEvent.LOCATION_UPDATE,
            LocationUpdate(latitude=-23.55, longitude=-46.63),
        )

        assert message == {
            "event": "locationUpdate",
            "data": {"latitude": -23.55, "longitude": -46.63},
        }

    def test_envelope_ignores_extra_keys(self) -> None:
        envelope = RelayEnvelope.model_validate({"event": "x", "data": {}, "ack": 1})
        assert envelope.event == "x"


class TestOrderId:
    """ID заказа: непрозрачный токен."""

    def test_string(self) -> None:
        assert JoinOrderRoom.model_validate({"orderId": "order-42"}).order_id == "order-42"

    def test_integer_becomes_string(self) -> None:
        assert JoinOrderRoom.model_validate({"orderId": 42}).order_id == "42"

    def test_whitespace_is_stripped(self) -> None:
        assert JoinOrderRoom.model_validate({"orderId": "  7 "}).order_id == "7"

    @pytest.mark.parametrize("value", ["", "   ", None, True, 4.2, {"id": 1}])
    def test_rejected(self, value: Any) -> None:
        with pytest.raises(ValidationError):
            JoinOrderRoom.model_validate({"orderId": value})

    def test_missing(self) -> None:
        with pytest.raises(ValidationError):
            JoinOrderRoom.model_validate({})


class TestUpdateLocation:
    """Тесты updateLocation."""

    def test_valid(self) -> None:
        payload = UpdateLocation.model_validate(
            {"orderId": "order-42", "latitude": -23.55, "longitude": -46.63}
        )

        assert payload.order_id == "order-42"
        assert payload.to_location_update() == LocationUpdate(latitude=-23.55, longitude=-46.63)

    def test_integer_coordinates(self) -> None:
        payload = UpdateLocation.model_validate({"orderId": "1", "latitude": 10, "longitude": 20})
        assert payload.latitude == 10.0
        assert payload.longitude == 20.0

    def test_boundaries(self) -> None:
        payload = UpdateLocation.model_validate({"orderId": "1", "latitude": 90, "longitude": -180})
        assert (payload.latitude, payload.longitude) == (90.0, -180.0)

    @pytest.mark.parametrize(
        "data",
        [
            {"orderId": "1", "longitude": 2.0},
            {"orderId": "1", "latitude": 1.0},
            {"orderId": "1", "latitude": None, "longitude": 2.0},
            {"orderId": "1", "latitude": "1.0", "longitude": 2.0},
            {"orderId": "1", "latitude": True, "longitude": 2.0},
            {"orderId": "1", "latitude": 91, "longitude": 2.0},
            {"orderId": "1", "latitude": 1.0, "longitude": -180.5},
            {"orderId": "1", "latitude": float("nan"), "longitude": 2.0},
            {"orderId": "1", "latitude": 1.0, "longitude": float("inf")},
            {"orderId": "1", "latitude": 10 ** 400, "longitude": 2.0},
            {"latitude": 1.0, "longitude": 2.0},
        ],
    )
    def test_rejected(self, data: dict[str, Any]) -> None:
        with pytest.raises(ValidationError):
            UpdateLocation.model_validate(data)

    def test_location_update_has_only_coordinates(self) -> None:
        payload = UpdateLocation.model_validate({"orderId": "1", "latitude": 1, "longitude": 2})
        assert set(payload.to_location_update().model_dump()) == {"latitude", "longitude"}
