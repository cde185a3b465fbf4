"""
Доменный слой (Core Domain).
Внешние коллабораторы ядра ретрансляции: поиск заказов.
"""

from src.core.orders import OrderRecord, OrderService

__all__ = [
    "OrderRecord",
    "OrderService",
]
