# src/services/tracking_ws/room_registry.py
"""
Реестр комнат: ID заказа -> множество соединений.

Все изменения членства сериализуются через asyncio.Lock.
Рассылка берёт снимок участников под блокировкой и отправляет вне её;
участник, удалённый во время уже идущей рассылки, может получить
это последнее сообщение.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from src.common.logger import log_debug

if TYPE_CHECKING:
    from src.services.tracking_ws.connection import Connection


class RoomRegistry:
    """
    Реестр комнат заказов.

    Поддерживает:
    - Вход/выход соединения в комнату (идемпотентно)
    - Выход из всех комнат при отключении
    - Рассылку сообщения всем участникам комнаты

    Пустая комната удаляется сразу: отсутствие и пустота неразличимы.
    """

    def __init__(self) -> None:
        # order_id -> set of connections
        self._rooms: dict[str, set["Connection"]] = {}
        self._lock = asyncio.Lock()

        # Для статистики
        self._total_joins = 0
        self._total_broadcasts = 0
        self._total_deliveries = 0
        self._total_dropped = 0

    async def join(self, connection: "Connection", order_id: str) -> bool:
        """
        Добавить соединение в комнату, создав её при необходимости.

        Закрытое соединение не добавляется: членство не должно
        переживать соединение.

        Returns:
            True если соединение стало участником (или уже было им)
        """
        async with self._lock:
            if connection.closed:
                return False

            members = self._rooms.setdefault(order_id, set())
            if connection not in members:
                members.add(connection)
                connection.rooms.add(order_id)
                self._total_joins += 1

        await log_debug(
            f"Соединение {connection.id} вошло в комнату заказа {order_id}",
            extra={"connection_id": connection.id, "order_id": order_id},
        )
        return True

    async def leave(self, connection: "Connection", order_id: str) -> None:
        """Убрать соединение из комнаты. Если соединение не участник, ничего не происходит."""
        async with self._lock:
            self._remove(connection, order_id)

    async def leave_all(self, connection: "Connection") -> list[str]:
        """
        Убрать соединение из всех комнат.

        Returns:
            ID комнат, которые соединение покинуло
        """
        async with self._lock:
            left = sorted(connection.rooms)
            for order_id in left:
                self._remove(connection, order_id)

        if left:
            await log_debug(
                f"Соединение {connection.id} покинуло комнаты: {', '.join(left)}",
                extra={"connection_id": connection.id, "rooms": left},
            )
        return left

    async def broadcast(
        self,
        order_id: str,
        message: dict[str, Any],
        sender: "Connection | None" = None,
        exclude_sender: bool = False,
    ) -> int:
        """
        Отправить сообщение всем участникам комнаты.

        Доставка каждому участнику независима: ошибка одного
        не мешает остальным. Рассылка в пустую комнату ничего не делает.

        Args:
            order_id: ID комнаты
            message: Готовый конверт сообщения
            sender: Отправитель (нужен только для exclude_sender)
            exclude_sender: Не отправлять сообщение самому отправителю

        Returns:
            Количество участников, принявших сообщение в очередь
        """
        async with self._lock:
            members = list(self._rooms.get(order_id, ()))
            self._total_broadcasts += 1

        delivered = 0
        for member in members:
            if exclude_sender and member is sender:
                continue
            try:
                accepted = await member.send(message)
            except Exception as e:
                accepted = False
                await log_debug(f"Ошибка постановки в очередь для {member.id}: {e!r}")
            if accepted:
                delivered += 1
            else:
                self._total_dropped += 1

        self._total_deliveries += delivered
        return delivered

    async def clear(self) -> None:
        """Удалить все комнаты (остановка сервиса)."""
        async with self._lock:
            for members in self._rooms.values():
                for connection in members:
                    connection.rooms.clear()
            self._rooms.clear()

    def _remove(self, connection: "Connection", order_id: str) -> None:
        """Внутренний метод выхода. Вызывается под блокировкой."""
        connection.rooms.discard(order_id)

        members = self._rooms.get(order_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._rooms[order_id]

    # === ЧТЕНИЕ ===

    def get_members(self, order_id: str) -> set["Connection"]:
        """Получить участников комнаты (копия)."""
        return set(self._rooms.get(order_id, ()))

    def get_rooms(self, connection: "Connection") -> set[str]:
        """Получить комнаты соединения (копия)."""
        return set(connection.rooms)

    def is_member(self, connection: "Connection", order_id: str) -> bool:
        return connection in self._rooms.get(order_id, ())

    def has_room(self, order_id: str) -> bool:
        return order_id in self._rooms

    @property
    def room_count(self) -> int:
        """Количество непустых комнат."""
        return len(self._rooms)

    def get_stats(self) -> dict[str, int]:
        """Получить статистику."""
        return {
            "total_rooms": len(self._rooms),
            "total_memberships": sum(len(m) for m in self._rooms.values()),
            "total_joins": self._total_joins,
            "total_broadcasts": self._total_broadcasts,
            "total_deliveries": self._total_deliveries,
            "total_dropped": self._total_dropped,
        }
