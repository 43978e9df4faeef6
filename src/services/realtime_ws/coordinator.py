# src/services/realtime_ws/coordinator.py
"""
Координатор рассылки геолокаций.

Реагирует на подключение, входящие события и отключение,
меняет реестр сессий и рассылает полученное состояние всем клиентам.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import WebSocket
from pydantic import ValidationError

from src.common.constants import ClientEvent, ServerEvent
from src.common.logger import log_debug, log_info, log_warning
from src.core.locations import InvalidLocationError, SessionRegistry
from src.services.realtime_ws.connection_manager import ConnectionManager
from src.shared.events import WireMessage


EventHandler = Callable[[str, Any], Awaitable[None]]


def make_message(event: ServerEvent, data: Any) -> dict[str, Any]:
    """Собрать кадр протокола server -> client."""
    return WireMessage(event=event.value, data=data).model_dump(mode="json")


class BroadcastCoordinator:
    """
    Единственный владелец реестра сессий.

    Жизненный цикл соединения: Connected -> Sharing -> Disconnected.

    Обработчики не содержат точек переключения: реестр меняется
    и сообщения ставятся в очереди синхронно, поэтому одно событие
    применяется целиком до начала следующего. Ожидаемые вызовы логирования
    не уступают управление event loop.
    """

    def __init__(self, registry: SessionRegistry, manager: ConnectionManager) -> None:
        self._registry = registry
        self._manager = manager
        self._handlers: dict[str, EventHandler] = {
            ClientEvent.SEND_LOCATION.value: self.handle_send_location,
            ClientEvent.LOCATION_SHARED.value: self.handle_location_shared,
            ClientEvent.STOP_LOCATION_SHARING.value: self.handle_stop_location_sharing,
        }

        self._total_events: int = 0
        self._rejected_events: int = 0

    # === LIFECYCLE ===

    async def connect(self, websocket: WebSocket) -> str:
        """
        Подключить клиента и сразу отправить ему полный снимок реестра.

        Returns:
            Идентификатор соединения
        """
        connection_id = await self._manager.connect(websocket)
        self._manager.send(
            connection_id,
            make_message(ServerEvent.INITIAL_LOCATIONS, self._registry.snapshot_wire()),
        )
        await log_info(
            f"Клиент подключён: {connection_id}",
            extra={"connection_id": connection_id, "active": self._manager.active_connections},
        )
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        """
        Отключить клиента: удалить его запись и сообщить остальным.
        Вызывается ровно один раз на соединение, из цикла приёма.
        """
        removed = self._registry.remove(connection_id)
        self._manager.unregister(connection_id)

        self._manager.broadcast_all(make_message(ServerEvent.USER_DISCONNECTED, connection_id))
        await log_info(
            f"Клиент отключён: {connection_id}",
            extra={"connection_id": connection_id, "had_location": removed},
        )

    # === INBOUND EVENTS ===

    async def handle_raw(self, connection_id: str, raw: str | bytes) -> None:
        """Разобрать JSON-кадр клиента и передать обработчику."""
        try:
            message = WireMessage.from_json(raw)
        except ValidationError:
            self._rejected_events += 1
            await log_warning(
                f"Некорректный кадр от {connection_id}",
                extra={"connection_id": connection_id, "raw": str(raw)[:200]},
            )
            return
        await self.dispatch(connection_id, message)

    async def dispatch(self, connection_id: str, message: WireMessage) -> None:
        """Вызвать обработчик по имени события."""
        self._total_events += 1
        handler = self._handlers.get(message.event)
        if handler is None:
            self._rejected_events += 1
            await log_warning(
                f"Неизвестное событие '{message.event}' от {connection_id}",
                extra={"connection_id": connection_id},
            )
            return
        await handler(connection_id, message.data)

    async def handle_send_location(self, connection_id: str, data: Any) -> None:
        """
        Принять геолокацию и разослать всем полный снимок реестра.

        Некорректная геолокация отбрасывается без ответа отправителю:
        реестр не меняется, рассылки нет.
        """
        try:
            self._registry.upsert(connection_id, data)
        except InvalidLocationError as e:
            self._rejected_events += 1
            await log_warning(
                f"Получена некорректная геолокация: {e.reason}",
                extra={"connection_id": connection_id, "data": data},
            )
            return

        self._manager.broadcast_all(
            make_message(ServerEvent.RECEIVE_LOCATION, self._registry.snapshot_wire())
        )

    async def handle_location_shared(self, connection_id: str, bus_number: Any) -> None:
        """Переслать всем объявление с номером автобуса. Реестр не меняется."""
        self._manager.broadcast_all(make_message(ServerEvent.LOCATION_SHARED, bus_number))
        await log_info(
            f"Автобус {bus_number} начал передачу геолокации",
            extra={"connection_id": connection_id},
        )

    async def handle_stop_location_sharing(self, connection_id: str, bus_number: Any) -> None:
        """Остановка передачи: серверной семантики нет, только логируем."""
        await log_debug(
            f"stop-location-sharing от {connection_id} (автобус {bus_number}) проигнорирован",
            extra={"connection_id": connection_id},
        )

    # === READ-ONLY ===

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Текущий снимок реестра в формате протокола."""
        return self._registry.snapshot_wire()

    def get_stats(self) -> dict[str, Any]:
        """Статистика координатора и соединений."""
        return {
            **self._manager.get_stats(),
            "tracked_locations": len(self._registry),
            "total_events": self._total_events,
            "rejected_events": self._rejected_events,
        }
