# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, AsyncGenerator, Callable

import pytest
import pytest_asyncio

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""

from src.services.tracking_ws.connection import Connection  # noqa: E402
from src.services.tracking_ws.room_registry import RoomRegistry  # noqa: E402


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "игнорируется",
        "PROJECT_NAME": "order_tracking_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "DEBUG",
        "LOG_FORMAT": "json",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_MAX_BYTES": 1024,
        "HOST": "127.0.0.1",
        "PORT": 3100,
        "CORS_ALLOW_ORIGINS": ["https://track.example.com"],
        "STATIC_DIR": "public_test",
        "SUPABASE_URL": "https://project.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
        "ORDERS_TABLE": "orders_test",
        "LOOKUP_TIMEOUT": 3.0,
        "SEND_TIMEOUT": 1.5,
        "OUTBOX_MAX_SIZE": 10,
    }


# =============================================================================
# ФИКСТУРЫ ТРАНСПОРТА
# =============================================================================

class FakeWebSocket:
    """WebSocket, который запоминает отправленные сообщения."""

    def __init__(self, fail: bool = False, delay: float = 0.0) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.fail = fail
        self.delay = delay

    async def send_json(self, message: dict[str, Any]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("socket is closed")
        self.sent.append(message)

    async def close(self, code: int = 1000) -> None:
        self.closed = True


@pytest.fixture
def fake_websocket() -> FakeWebSocket:
    return FakeWebSocket()


@pytest.fixture
def websocket_factory() -> type[FakeWebSocket]:
    """Класс FakeWebSocket для сокетов с особым поведением (fail, delay)."""
    return FakeWebSocket


@pytest.fixture
def registry() -> RoomRegistry:
    """Новый реестр комнат на каждый тест."""
    return RoomRegistry()


@pytest_asyncio.fixture
async def make_connection() -> AsyncGenerator[Callable[..., Connection], None]:
    """
    Фабрика запущенных соединений поверх FakeWebSocket.
    Все созданные соединения закрываются после теста.
    """
    created: list[Connection] = []

    def factory(
        websocket: FakeWebSocket | None = None,
        send_timeout: float = 1.0,
        outbox_size: int = 100,
        start: bool = True,
    ) -> Connection:
        connection = Connection(
            websocket or FakeWebSocket(),
            send_timeout=send_timeout,
            outbox_size=outbox_size,
        )
        if start:
            connection.start()
        created.append(connection)
        return connection

    yield factory

    for connection in created:
        await connection.close()


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def sample_order_row() -> dict[str, Any]:
    """Строка заказа в том виде, в каком её отдаёт хранилище."""
    return {
        "id": "order-42",
        "client_lat": -23.5505,
        "client_lng": -46.6333,
        "client_address": "Av. Paulista, 1000",
        "status": "em_rota",
        "tracking_link": "https://track.example.com/order-42",
    }
