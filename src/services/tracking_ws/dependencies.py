# src/services/tracking_ws/dependencies.py
"""
Зависимости FastAPI.
Реестр комнат и сервис заказов живут в app.state и создаются в lifespan.
"""

from __future__ import annotations

from fastapi.requests import HTTPConnection

from src.config import settings
from src.config.loader import RelaySettings
from src.core.orders import OrderService
from src.services.tracking_ws.room_registry import RoomRegistry


def get_registry(conn: HTTPConnection) -> RoomRegistry:
    """Реестр комнат текущего приложения."""
    return conn.app.state.registry


def get_order_service(conn: HTTPConnection) -> OrderService:
    """Сервис поиска заказов текущего приложения."""
    return conn.app.state.order_service


def get_relay_settings() -> RelaySettings:
    """Настройки ретрансляции."""
    return settings.relay
