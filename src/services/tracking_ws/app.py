# src/services/tracking_ws/app.py
"""
FastAPI приложение Order Tracking Relay.

WebSocket endpoints:
- /ws[?orderId=...]: курьеры и клиенты (joinOrderRoom, leaveOrderRoom, updateLocation)

REST endpoints:
- GET /api/orders/{order_id}: статические данные заказа
- GET /ping: проверка живости ("pong")
- GET /health: проверка здоровья
- GET /stats: статистика комнат
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from src.common.constants import SERVICE_NAME, HealthState
from src.common.logger import log_error, log_info, log_warning, setup_logging
from src.config import settings
from src.config.loader import RelaySettings
from src.core.orders import (
    OrderLookupError,
    OrderNotFoundError,
    OrderRecord,
    OrderRepository,
    OrderService,
)
from src.services.tracking_ws.connection import Connection
from src.services.tracking_ws.dependencies import (
    get_order_service,
    get_registry,
    get_relay_settings,
)
from src.services.tracking_ws.relay import Relay
from src.services.tracking_ws.room_registry import RoomRegistry
from src.shared.models.common import ErrorResponse, HealthStatus, RelayStatsResponse


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Запуск Order Tracking Relay...")

    app.state.registry = RoomRegistry()

    repository = OrderRepository(
        rest_url=settings.supabase.rest_url,
        api_key=settings.supabase.SUPABASE_ANON_KEY,
        table=settings.supabase.ORDERS_TABLE,
        timeout=settings.supabase.LOOKUP_TIMEOUT,
    )
    app.state.order_service = OrderService(repository)

    if not settings.supabase.is_configured:
        # Деградированный режим: поиск заказов вернёт 500 на запросе
        await log_warning("SUPABASE_URL или SUPABASE_ANON_KEY не настроены")

    yield

    await log_info("Остановка Order Tracking Relay...")
    await app.state.registry.clear()
    await app.state.order_service.close()


# === APP ===

app = FastAPI(
    title="Order Tracking Relay",
    description="Отслеживание заказов: данные заказа и геолокация курьера в реальном времени.",
    version=settings.system.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.server.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# === HEALTH CHECK ===

@app.get("/ping", response_class=PlainTextResponse, tags=["Health"])
async def ping() -> str:
    """Проверка живости."""
    return "pong"


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check(
    order_service: OrderService = Depends(get_order_service),
) -> HealthStatus:
    """Проверка здоровья сервиса."""
    lookup_ready = order_service.is_available
    return HealthStatus(
        service=SERVICE_NAME,
        status=HealthState.HEALTHY.value if lookup_ready else HealthState.DEGRADED.value,
        version=settings.system.VERSION,
        dependencies={"supabase": "configured" if lookup_ready else "not_configured"},
    )


# === STATS ===

@app.get("/stats", response_model=RelayStatsResponse, tags=["Stats"])
async def get_stats(registry: RoomRegistry = Depends(get_registry)) -> RelayStatsResponse:
    """Получить статистику комнат."""
    return RelayStatsResponse(**registry.get_stats())


# === ORDERS ===

@app.get(
    "/api/orders/{order_id}",
    response_model=OrderRecord,
    responses={
        404: {"model": ErrorResponse, "description": "Заказ не найден"},
        500: {"model": ErrorResponse, "description": "Хранилище заказов недоступно"},
    },
    tags=["Orders"],
    summary="Данные заказа",
)
async def get_order(
    order_id: str,
    order_service: OrderService = Depends(get_order_service),
):
    """Получить статические данные заказа по ID."""
    try:
        return await order_service.get_order(order_id)
    except OrderNotFoundError:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="Заказ не найден").model_dump(),
        )
    except OrderLookupError as e:
        await log_error(f"Ошибка поиска заказа {order_id}: {e}", extra={"order_id": order_id})
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Ошибка при поиске заказа в хранилище").model_dump(),
        )
    except Exception as e:
        await log_error(f"Внутренняя ошибка при поиске заказа {order_id}: {e!r}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Внутренняя ошибка сервера").model_dump(),
        )


# === WEBSOCKET ===

@app.websocket("/ws")
async def tracking_websocket(
    websocket: WebSocket,
    order_id: str | None = Query(default=None, alias="orderId"),
    registry: RoomRegistry = Depends(get_registry),
    relay_settings: RelaySettings = Depends(get_relay_settings),
) -> None:
    """
    WebSocket курьера или клиента.

    Входящие сообщения:
    - {"event": "joinOrderRoom", "data": {"orderId": "42"}}
    - {"event": "leaveOrderRoom", "data": {"orderId": "42"}}
    - {"event": "updateLocation", "data": {"orderId": "42", "latitude": -23.55, "longitude": -46.63}}

    Исходящие:
    - {"event": "locationUpdate", "data": {"latitude": -23.55, "longitude": -46.63}}
    """
    await websocket.accept()

    connection = Connection(
        websocket,
        send_timeout=relay_settings.SEND_TIMEOUT,
        outbox_size=relay_settings.OUTBOX_MAX_SIZE,
    )
    connection.start()
    relay = Relay(connection, registry)

    await log_info(
        f"Новое соединение {connection.id}",
        extra={"connection_id": connection.id, "client": str(websocket.client)},
    )

    try:
        # Автоматический вход в комнату, если передан orderId
        if order_id:
            await relay.join(order_id)

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes")
            if raw is not None:
                await relay.handle_raw(raw)

    except WebSocketDisconnect:
        pass
    except Exception as e:
        await log_error(f"Ошибка соединения {connection.id}: {e!r}", exc_info=True)
    finally:
        await relay.on_disconnect()


# === STATIC ===

# Монтируется последним, чтобы не перекрывать API
if settings.server.static_path.is_dir():
    app.mount("/", StaticFiles(directory=settings.server.static_path, html=True), name="static")

