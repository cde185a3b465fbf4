# src/services/tracking_ws/__init__.py
"""
Order Tracking Relay: ретрансляция геолокации курьера в реальном времени.

Обеспечивает:
- WebSocket соединения курьеров и клиентов
- Комнаты по ID заказа (вход, выход, очистка при отключении)
- Рассылку locationUpdate всем участникам комнаты
- Поиск статических данных заказа (GET /api/orders/{id})
"""
