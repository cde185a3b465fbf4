# src/services/__init__.py
"""
Сервисы приложения.

Сервисы:
- tracking_ws: HTTP API заказов и WebSocket ретрансляция геолокации курьера
"""

__all__: list[str] = []
