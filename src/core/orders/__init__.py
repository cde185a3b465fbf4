"""
Домен заказов.
Модель статических данных заказа и сервис поиска по ID.
"""

from src.core.orders.models import OrderRecord
from src.core.orders.repository import OrderLookupError, OrderRepository
from src.core.orders.service import OrderNotFoundError, OrderService

__all__ = [
    "OrderRecord",
    "OrderRepository",
    "OrderLookupError",
    "OrderService",
    "OrderNotFoundError",
]
