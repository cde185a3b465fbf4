# src/core/orders/models.py
"""
Модели данных заказов.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Колонки, которые отдаёт GET /api/orders/{id}
ORDER_RECORD_FIELDS: tuple[str, ...] = (
    "id",
    "client_lat",
    "client_lng",
    "client_address",
    "status",
    "tracking_link",
)


class OrderRecord(BaseModel):
    """Статические данные заказа (только чтение)."""

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str | int = Field(..., description="ID заказа")
    client_lat: Optional[float] = Field(None, description="Широта клиента")
    client_lng: Optional[float] = Field(None, description="Долгота клиента")
    client_address: Optional[str] = Field(None, description="Адрес доставки")
    status: Optional[str] = Field(None, description="Статус заказа")
    tracking_link: Optional[str] = Field(None, description="Ссылка на отслеживание")
