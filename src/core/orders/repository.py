# src/core/orders/repository.py
"""
Репозиторий заказов поверх Supabase (PostgREST API).
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from src.common.logger import log_debug, log_error
from src.core.orders.models import ORDER_RECORD_FIELDS, OrderRecord


class OrderLookupError(Exception):
    """Хранилище заказов недоступно или вернуло некорректный ответ."""
    pass


class OrderRepository:
    """
    Репозиторий заказов.

    Читает одну строку таблицы заказов по ID:
    GET {rest_url}/{table}?select=...&id=eq.{order_id}
    """

    def __init__(
        self,
        rest_url: str,
        api_key: str,
        table: str = "orders",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            rest_url: Базовый URL PostgREST ({SUPABASE_URL}/rest/v1)
            api_key: Анонимный ключ Supabase
            table: Имя таблицы заказов
            timeout: Таймаут запроса в секундах
            transport: Транспорт httpx (подменяется в тестах)
        """
        self._configured = bool(rest_url and api_key)
        self._table = table
        self.client = httpx.AsyncClient(
            base_url=rest_url if self._configured else "",
            timeout=timeout,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        """Заданы ли URL и ключ хранилища."""
        return self._configured

    async def close(self) -> None:
        """Закрыть HTTP клиент."""
        await self.client.aclose()

    async def get_by_id(self, order_id: str) -> Optional[OrderRecord]:
        """
        Получает заказ по ID.

        Args:
            order_id: ID заказа

        Returns:
            Заказ или None, если такой строки нет

        Raises:
            OrderLookupError: Хранилище не настроено, недоступно
                или вернуло больше одной строки
        """
        if not self._configured:
            raise OrderLookupError("Хранилище заказов не настроено")

        params = {
            "select": ",".join(ORDER_RECORD_FIELDS),
            "id": f"eq.{order_id}",
        }

        try:
            response = await self.client.get(f"/{self._table}", params=params)
            response.raise_for_status()
            rows: Any = response.json()
        except httpx.HTTPStatusError as e:
            await log_error(
                f"Хранилище заказов ответило {e.response.status_code} для заказа {order_id}",
                extra={"order_id": order_id, "body": e.response.text[:500]},
            )
            raise OrderLookupError(f"Ошибка хранилища: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            await log_error(f"Хранилище заказов недоступно: {e}", extra={"order_id": order_id})
            raise OrderLookupError("Хранилище заказов недоступно") from e
        except ValueError as e:
            await log_error(f"Некорректный JSON от хранилища для заказа {order_id}: {e}")
            raise OrderLookupError("Некорректный ответ хранилища") from e

        if not isinstance(rows, list):
            raise OrderLookupError("Некорректный ответ хранилища")

        if not rows:
            await log_debug(f"Заказ {order_id} не найден в хранилище")
            return None

        if len(rows) > 1:
            raise OrderLookupError(f"Найдено несколько заказов с ID {order_id}")

        try:
            return OrderRecord.model_validate(rows[0])
        except ValidationError as e:
            await log_error(f"Некорректная строка заказа {order_id}: {e}")
            raise OrderLookupError("Некорректный ответ хранилища") from e
