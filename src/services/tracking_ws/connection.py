# src/services/tracking_ws/connection.py
"""
Одно WebSocket-соединение участника (курьер или клиент).

Исходящие сообщения идут через ограниченную очередь, которую разбирает
отдельная задача-писатель: send() никогда не блокирует отправителя,
а медленный участник не задерживает рассылку остальным.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

from src.common.logger import log_debug, log_warning


class Connection:
    """
    Соединение участника.

    Владеет очередью исходящих сообщений и задачей-писателем.
    Реестр комнат хранит только ссылку на соединение и поддерживает
    множество `rooms` в актуальном состоянии.
    """

    def __init__(
        self,
        websocket: WebSocket,
        send_timeout: float = 5.0,
        outbox_size: int = 100,
    ) -> None:
        """
        Args:
            websocket: Принятое WebSocket-соединение
            send_timeout: Максимальное время одной отправки, секунды
            outbox_size: Максимум неотправленных сообщений
        """
        self.id: str = uuid4().hex
        self.websocket = websocket
        self.connected_at = datetime.now(timezone.utc)

        # ID комнат, в которых состоит соединение (ведёт RoomRegistry)
        self.rooms: set[str] = set()

        self._send_timeout = send_timeout
        self._outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=outbox_size)
        self._writer: asyncio.Task | None = None
        self._closed = False

        # Статистика
        self.messages_sent = 0
        self.messages_dropped = 0

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, rooms={sorted(self.rooms)!r})"

    @property
    def closed(self) -> bool:
        """Соединение закрыто и больше не принимает сообщения."""
        return self._closed

    def start(self) -> None:
        """Запустить задачу-писателя."""
        if self._writer is None and not self._closed:
            self._writer = asyncio.create_task(self._write_loop(), name=f"ws-writer-{self.id}")

    async def send(self, message: dict[str, Any]) -> bool:
        """
        Поставить сообщение в очередь на отправку.

        Returns:
            True если сообщение принято, False если соединение закрыто
            или очередь переполнена (сообщение отброшено)
        """
        if self._closed:
            return False

        try:
            self._outbox.put_nowait(message)
        except asyncio.QueueFull:
            self.messages_dropped += 1
            await log_warning(
                f"Очередь соединения {self.id} переполнена, сообщение отброшено",
                extra={"connection_id": self.id},
            )
            return False
        return True

    async def flush(self) -> None:
        """Дождаться отправки всех сообщений из очереди."""
        await self._outbox.join()

    async def close(self) -> None:
        """
        Закрыть соединение: остановить писателя и отбросить очередь.

        Идемпотентна. Сам WebSocket не закрывается, им владеет транспорт.
        """
        self._closed = True

        if self._writer is not None and self._writer is not asyncio.current_task():
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
        self._writer = None

        self._discard_pending()

    def _discard_pending(self) -> None:
        while True:
            try:
                self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                break
            self.messages_dropped += 1
            self._outbox.task_done()

    async def _write_loop(self) -> None:
        """Разбирать очередь и отправлять сообщения по одному, по порядку."""
        while True:
            message = await self._outbox.get()
            try:
                await asyncio.wait_for(
                    self.websocket.send_json(message),
                    timeout=self._send_timeout,
                )
                self.messages_sent += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.messages_dropped += 1
                await log_warning(
                    f"Не удалось отправить сообщение соединению {self.id}: {e!r}",
                    extra={"connection_id": self.id},
                )
                await self._abort()
                return
            finally:
                self._outbox.task_done()

    async def _abort(self) -> None:
        """
        Соединение сломано: перестаём принимать сообщения и закрываем сокет,
        чтобы цикл чтения завершился и соединение покинуло все комнаты.
        """
        self._closed = True
        self._discard_pending()
        try:
            await self.websocket.close()
        except Exception as e:
            await log_debug(f"Сокет {self.id} уже закрыт: {e!r}")
