# src/core/orders/service.py
"""
Сервис поиска заказов.
"""

from __future__ import annotations

from src.common.logger import log_info
from src.common.constants import TypeMsg
from src.core.orders.models import OrderRecord
from src.core.orders.repository import OrderRepository


class OrderNotFoundError(Exception):
    """Заказ с указанным ID не существует."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Заказ {order_id} не найден")
        self.order_id = order_id


class OrderService:
    """Сервис статических данных заказа."""

    def __init__(self, repository: OrderRepository) -> None:
        self._repository = repository

    @property
    def is_available(self) -> bool:
        """Настроено ли хранилище заказов."""
        return self._repository.is_configured

    async def get_order(self, order_id: str) -> OrderRecord:
        """
        Получает заказ по ID.

        Raises:
            OrderNotFoundError: Заказа нет
            OrderLookupError: Хранилище недоступно
        """
        order = await self._repository.get_by_id(order_id)
        if order is None:
            await log_info(f"Запрошен несуществующий заказ {order_id}", type_msg=TypeMsg.DEBUG)
            raise OrderNotFoundError(order_id)
        return order

    async def close(self) -> None:
        """Освобождает ресурсы репозитория."""
        await self._repository.close()
