# src/services/realtime_ws/connection_manager.py
"""
Менеджер WebSocket соединений.
Выдаёт идентификаторы соединений и рассылает сообщения.

У каждого соединения своя очередь исходящих сообщений и своя задача-отправитель,
поэтому медленный клиент не задерживает рассылку остальным.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import WebSocket

from src.common.logger import log_debug, log_warning


DEFAULT_SEND_QUEUE_SIZE = 256


@dataclass
class ConnectionInfo:
    """Информация о соединении."""
    websocket: WebSocket
    connection_id: str
    queue: asyncio.Queue
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sender_task: asyncio.Task | None = None


class ConnectionManager:
    """
    Менеджер WebSocket соединений.

    Поддерживает:
    - Подключение с выдачей нового уникального идентификатора
    - Отправку одному соединению и рассылку всем
    - Изоляцию сбоев: ошибка отправки закрывает только это соединение
    """

    def __init__(self, send_queue_size: int = DEFAULT_SEND_QUEUE_SIZE) -> None:
        # connection_id -> ConnectionInfo
        self._connections: dict[str, ConnectionInfo] = {}
        self._send_queue_size = send_queue_size

        # Для статистики
        self._total_connections: int = 0
        self._total_messages_sent: int = 0
        self._total_dropped: int = 0

    @property
    def active_connections(self) -> int:
        """Количество активных соединений."""
        return len(self._connections)

    def connection_ids(self) -> list[str]:
        """Идентификаторы активных соединений."""
        return list(self._connections)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._connections

    async def connect(self, websocket: WebSocket) -> str:
        """
        Принять соединение и зарегистрировать канал отправки.

        Идентификатор никогда не переиспользуется.

        Returns:
            Идентификатор нового соединения
        """
        await websocket.accept()

        connection_id = uuid4().hex
        conn = ConnectionInfo(
            websocket=websocket,
            connection_id=connection_id,
            queue=asyncio.Queue(maxsize=self._send_queue_size),
        )
        conn.sender_task = asyncio.create_task(
            self._sender(conn), name=f"ws_sender_{connection_id}"
        )
        self._connections[connection_id] = conn
        self._total_connections += 1
        return connection_id

    def unregister(self, connection_id: str) -> ConnectionInfo | None:
        """
        Убрать соединение из рассылки и остановить его отправителя.
        Повторный вызов ничего не делает.
        """
        conn = self._connections.pop(connection_id, None)
        if conn is None:
            return None

        if conn.sender_task and not conn.sender_task.done():
            conn.sender_task.cancel()
        self._discard_pending(conn)
        return conn

    def send(self, connection_id: str, message: dict[str, Any]) -> bool:
        """
        Поставить сообщение в очередь одного соединения.

        Не ждёт отправки. Если очередь переполнена, клиент слишком медленный:
        соединение закрывается.

        Returns:
            True если сообщение поставлено в очередь
        """
        conn = self._connections.get(connection_id)
        if conn is None:
            return False

        try:
            conn.queue.put_nowait(message)
        except asyncio.QueueFull:
            self._total_dropped += 1
            self._drop(conn)
            return False
        return True

    def broadcast_all(self, message: dict[str, Any], exclude: str | None = None) -> int:
        """
        Поставить сообщение в очереди всех соединений.

        Returns:
            Количество соединений, которым сообщение поставлено в очередь
        """
        queued = 0
        for connection_id in list(self._connections):
            if connection_id == exclude:
                continue
            if self.send(connection_id, message):
                queued += 1
        return queued

    async def flush(self) -> None:
        """Дождаться отправки всего, что уже стоит в очередях."""
        await asyncio.gather(*(conn.queue.join() for conn in list(self._connections.values())))

    async def close_all(self) -> None:
        """Закрыть все соединения (остановка сервера)."""
        for connection_id in list(self._connections):
            conn = self.unregister(connection_id)
            if conn is not None:
                await self._close_connection(conn)

    def get_stats(self) -> dict[str, Any]:
        """Получить статистику."""
        return {
            "active_connections": len(self._connections),
            "total_connections_ever": self._total_connections,
            "total_messages_sent": self._total_messages_sent,
            "total_dropped": self._total_dropped,
        }

    async def _sender(self, conn: ConnectionInfo) -> None:
        """Задача-отправитель: по одному сообщению из очереди в сокет."""
        while True:
            message = await conn.queue.get()
            try:
                await conn.websocket.send_json(message)
                self._total_messages_sent += 1
            except Exception as e:
                # Соединение разорвано: закрываем только его
                await log_warning(
                    f"Не удалось отправить сообщение {conn.connection_id}: {e!r}",
                    extra={"connection_id": conn.connection_id},
                )
                if self._connections.get(conn.connection_id) is conn:
                    del self._connections[conn.connection_id]
                    self._discard_pending(conn)
                    await self._close_connection(conn)
                return
            finally:
                conn.queue.task_done()

    def _drop(self, conn: ConnectionInfo) -> None:
        """Отключить медленного клиента, не блокируя вызывающего."""
        if self.unregister(conn.connection_id) is None:
            return
        asyncio.create_task(self._close_connection(conn), name=f"ws_close_{conn.connection_id}")

    @staticmethod
    def _discard_pending(conn: ConnectionInfo) -> None:
        """Выбросить неотправленные сообщения, чтобы join() очереди не зависал."""
        while True:
            try:
                conn.queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            conn.queue.task_done()

    async def _close_connection(self, conn: ConnectionInfo) -> None:
        """Закрыть соединение."""
        try:
            await conn.websocket.close()
        except Exception as e:
            # Сокет уже закрыт клиентом
            await log_debug(f"Соединение {conn.connection_id} уже закрыто: {e!r}")
