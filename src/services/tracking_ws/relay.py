# src/services/tracking_ws/relay.py
"""
Обработчик сообщений одного соединения.

Состояния: CONNECTED (0..N комнат) -> DISCONNECTED (терминальное).
Некорректные сообщения молча отбрасываются: ни ошибки отправителю,
ни закрытия соединения. Подтверждений нет.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from pydantic import ValidationError

from src.common.logger import log_debug, log_info
from src.services.tracking_ws.messages import (
    JoinOrderRoom,
    LeaveOrderRoom,
    RelayEnvelope,
    RelayEvent,
    UpdateLocation,
    build_envelope,
    parse_envelope,
)

if TYPE_CHECKING:
    from src.services.tracking_ws.connection import Connection
    from src.services.tracking_ws.room_registry import RoomRegistry


class RelayState(str, Enum):
    """Состояние соединения."""
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class Relay:
    """
    Логика ретрансляции, привязанная к одному соединению.

    Входящие события:
    - joinOrderRoom  -> RoomRegistry.join
    - leaveOrderRoom -> RoomRegistry.leave
    - updateLocation -> RoomRegistry.broadcast(locationUpdate), включая отправителя
    """

    def __init__(self, connection: "Connection", registry: "RoomRegistry") -> None:
        self.connection = connection
        self.registry = registry
        self.state = RelayState.CONNECTED

        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[None]]] = {
            RelayEvent.JOIN_ORDER_ROOM.value: self._on_join_order_room,
            RelayEvent.LEAVE_ORDER_ROOM.value: self._on_leave_order_room,
            RelayEvent.UPDATE_LOCATION.value: self._on_update_location,
        }

    @property
    def is_connected(self) -> bool:
        return self.state is RelayState.CONNECTED

    async def handle_raw(self, raw: str | bytes) -> None:
        """Обработать сырой кадр (текст или UTF-8 байты с JSON)."""
        if not self.is_connected:
            return

        try:
            envelope = parse_envelope(raw)
        except (ValueError, RecursionError, ValidationError) as e:
            # RecursionError: слишком глубокая вложенность JSON
            await self._drop("невалидный кадр", e)
            return

        await self.handle_envelope(envelope)

    async def handle_message(self, message: Any) -> None:
        """Обработать уже разобранный JSON-объект {"event": ..., "data": ...}."""
        if not self.is_connected:
            return

        try:
            envelope = RelayEnvelope.model_validate(message)
        except ValidationError as e:
            await self._drop("невалидный конверт", e)
            return

        await self.handle_envelope(envelope)

    async def handle_envelope(self, envelope: RelayEnvelope) -> None:
        """Передать конверт обработчику события."""
        if not self.is_connected:
            return

        handler = self._handlers.get(envelope.event)
        if handler is None:
            await self._drop(f"неизвестное событие {envelope.event!r}")
            return

        try:
            await handler(envelope.data)
        except ValidationError as e:
            await self._drop(f"некорректные данные события {envelope.event!r}", e)

    async def join(self, order_id: str) -> None:
        """Войти в комнату заказа (например, из ?orderId= при подключении)."""
        await self.handle_envelope(
            RelayEnvelope(event=RelayEvent.JOIN_ORDER_ROOM.value, data={"orderId": order_id})
        )

    async def on_disconnect(self) -> None:
        """
        Транспорт отключился: покинуть все комнаты.

        Выполняется ровно один раз; соединение помечается закрытым
        до выхода из комнат, поэтому параллельный join не оставит членства.
        """
        if not self.is_connected:
            return
        self.state = RelayState.DISCONNECTED

        await self.connection.close()
        rooms = await self.registry.leave_all(self.connection)

        await log_info(
            f"Соединение {self.connection.id} отключено (комнат: {len(rooms)})",
            extra={"connection_id": self.connection.id, "rooms": rooms},
        )

    # === ОБРАБОТЧИКИ ===

    async def _on_join_order_room(self, data: dict[str, Any]) -> None:
        payload = JoinOrderRoom.model_validate(data)
        await self.registry.join(self.connection, payload.order_id)

    async def _on_leave_order_room(self, data: dict[str, Any]) -> None:
        payload = LeaveOrderRoom.model_validate(data)
        await self.registry.leave(self.connection, payload.order_id)
        await log_debug(
            f"Соединение {self.connection.id} вышло из комнаты заказа {payload.order_id}",
            extra={"connection_id": self.connection.id, "order_id": payload.order_id},
        )

    async def _on_update_location(self, data: dict[str, Any]) -> None:
        payload = UpdateLocation.model_validate(data)
        message = build_envelope(RelayEvent.LOCATION_UPDATE, payload.to_location_update())

        # Отправитель тоже участник комнаты и получает своё же обновление
        delivered = await self.registry.broadcast(
            payload.order_id,
            message,
            sender=self.connection,
            exclude_sender=False,
        )

        await log_debug(
            f"Локация заказа {payload.order_id} разослана: {delivered} получателей",
            extra={
                "order_id": payload.order_id,
                "latitude": payload.latitude,
                "longitude": payload.longitude,
                "delivered": delivered,
            },
        )

    async def _drop(self, reason: str, error: Exception | None = None) -> None:
        await log_debug(
            f"Сообщение от {self.connection.id} отброшено: {reason}",
            extra={"connection_id": self.connection.id, "error": str(error) if error else None},
        )
