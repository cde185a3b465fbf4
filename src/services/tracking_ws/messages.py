# src/services/tracking_ws/messages.py
"""
Контракты сообщений ретранслятора.

Конверт в обе стороны: {"event": "<имя>", "data": {...}}

Входящие:
- joinOrderRoom   {orderId}
- leaveOrderRoom  {orderId}
- updateLocation  {orderId, latitude, longitude}

Исходящие:
- locationUpdate  {latitude, longitude}
"""

from __future__ import annotations

import json
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RelayEvent(str, Enum):
    """Имена событий протокола."""
    JOIN_ORDER_ROOM = "joinOrderRoom"
    LEAVE_ORDER_ROOM = "leaveOrderRoom"
    UPDATE_LOCATION = "updateLocation"
    LOCATION_UPDATE = "locationUpdate"


def _coerce_order_id(value: Any) -> Any:
    """ID заказа: непрозрачный токен, строка или целое число из JSON."""
    if isinstance(value, bool):
        raise ValueError("orderId не может быть bool")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _require_number(value: Any) -> Any:
    """Координата должна быть JSON-числом (не bool и не строкой) и конечной."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("координата должна быть числом")
    try:
        value = float(value)
    except OverflowError:
        raise ValueError("координата вне диапазона float") from None
    if not math.isfinite(value):
        raise ValueError("координата должна быть конечным числом")
    return value


# =============================================================================
# КОНВЕРТ
# =============================================================================

class RelayEnvelope(BaseModel):
    """Конверт сообщения."""

    model_config = ConfigDict(extra="ignore")

    event: str
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v


def parse_envelope(raw: str | bytes) -> RelayEnvelope:
    """
    Разбирает входящий кадр.

    Raises:
        ValueError: Невалидный JSON (json.JSONDecodeError / UnicodeDecodeError)
        pydantic.ValidationError: JSON не является конвертом
    """
    return RelayEnvelope.model_validate(json.loads(raw))


def build_envelope(event: RelayEvent, payload: BaseModel) -> dict[str, Any]:
    """Собирает исходящий конверт."""
    return {"event": event.value, "data": payload.model_dump(by_alias=True)}


# =============================================================================
# ВХОДЯЩИЕ
# =============================================================================

class _OrderRoomMessage(BaseModel):
    """Базовое сообщение с ID комнаты заказа."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: str = Field(..., alias="orderId", min_length=1)

    @field_validator("order_id", mode="before")
    @classmethod
    def coerce_order_id(cls, v: Any) -> Any:
        return _coerce_order_id(v)


class JoinOrderRoom(_OrderRoomMessage):
    """Войти в комнату заказа."""


class LeaveOrderRoom(_OrderRoomMessage):
    """Выйти из комнаты заказа."""


class UpdateLocation(_OrderRoomMessage):
    """Курьер сообщает новую позицию."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        return _require_number(v)

    def to_location_update(self) -> "LocationUpdate":
        return LocationUpdate(latitude=self.latitude, longitude=self.longitude)


# =============================================================================
# ИСХОДЯЩИЕ
# =============================================================================

class LocationUpdate(BaseModel):
    """Позиция, рассылаемая участникам комнаты. Не сохраняется."""

    latitude: float
    longitude: float
