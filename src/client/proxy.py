# src/client/proxy.py
"""
Клиентский прокси сессии (водитель и пассажир).

Переводит показания датчика в исходящие send-location,
а входящие снимки и уведомления — в изменения карты.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, WebSocketException

from src.client.ports import LocationSensor, LocationUnavailableError, MapRenderer, Notifier
from src.common.constants import ClientEvent, ServerEvent
from src.common.geo import find_nearest
from src.common.localization import get_text
from src.common.logger import log_debug, log_info, log_warning
from src.config import settings
from src.shared.events import WireMessage
from src.shared.models.location_dto import LocationPayload


@dataclass(frozen=True)
class MarkerState:
    """То, что сейчас показано на карте для одного соединения."""
    latitude: float
    longitude: float
    label: str | None


class ClientSessionProxy:
    """
    Прокси сессии клиента.

    Карта сверяется с каждым полным снимком: новые идентификаторы
    добавляются, известные обновляются. Маркер удаляется только по
    user-disconnected, сам по таймауту прокси ничего не убирает.
    """

    def __init__(
        self,
        renderer: MapRenderer,
        sensor: LocationSensor,
        notifier: Notifier,
        *,
        server_url: str | None = None,
        update_interval: float | None = None,
        reconnect_delay: float | None = None,
        language: str | None = None,
        connector: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self._renderer = renderer
        self._sensor = sensor
        self._notifier = notifier
        client_cfg = settings.client
        self._server_url = client_cfg.SERVER_URL if server_url is None else server_url
        self._update_interval = client_cfg.LOCATION_UPDATE_INTERVAL if update_interval is None else update_interval
        self._reconnect_delay = client_cfg.RECONNECT_DELAY if reconnect_delay is None else reconnect_delay
        self._lang = client_cfg.LANGUAGE if language is None else language
        self._connector = connector

        self._ws: Any = None
        self._running = False
        self._markers: dict[str, MarkerState] = {}

        self._bus_number: str | None = None
        self._share_task: asyncio.Task | None = None
        # Не даём запустить два запроса геолокации одновременно
        self._is_locating = False

        self._handlers: dict[str, Callable[[Any], Awaitable[None]]] = {
            ServerEvent.INITIAL_LOCATIONS.value: self.apply_snapshot,
            ServerEvent.RECEIVE_LOCATION.value: self.apply_snapshot,
            ServerEvent.USER_DISCONNECTED.value: self.remove_marker,
            ServerEvent.LOCATION_SHARED.value: self._on_location_shared,
        }

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    @property
    def is_sharing(self) -> bool:
        return self._share_task is not None and not self._share_task.done()

    @property
    def bus_number(self) -> str | None:
        return self._bus_number

    @property
    def markers(self) -> dict[str, MarkerState]:
        """Копия состояния карты."""
        return dict(self._markers)

    def _t(self, key: str, **kwargs: Any) -> str:
        return get_text(key, self._lang, **kwargs)

    # === CONNECTION ===

    async def run(self) -> None:
        """
        Держать соединение с сервером.

        При сбое показывает постоянное уведомление и переподключается
        через фиксированную паузу.
        """
        self._running = True
        while self._running:
            connected = False
            try:
                async with self._connector(self._server_url) as ws:
                    self._ws = ws
                    connected = True
                    await log_info(f"Подключено к {self._server_url}")
                    async for raw in ws:
                        await self.handle_message(raw)
                if self._running:
                    self._notifier.notify(self._t("DISCONNECTED_RECONNECTING"), persistent=True)
            except (OSError, WebSocketException) as e:
                await log_warning(f"Сбой соединения с {self._server_url}: {e!r}")
                key = "DISCONNECTED_RECONNECTING" if connected else "CONNECTION_FAILED"
                self._notifier.notify(self._t(key), persistent=True)
            finally:
                self._ws = None

            if self._running:
                await asyncio.sleep(self._reconnect_delay)

    async def close(self) -> None:
        """Остановить передачу, переподключения и закрыть соединение."""
        self._running = False
        await self._cancel_share_task()
        ws = self._ws
        if ws is not None:
            await ws.close()

    async def emit(self, event: ClientEvent, data: Any) -> bool:
        """
        Отправить событие серверу.

        Returns:
            False если соединения нет или оно оборвалось
        """
        ws = self._ws
        if ws is None:
            return False
        try:
            await ws.send(WireMessage(event=event.value, data=data).to_json())
        except ConnectionClosed as e:
            await log_warning(f"Не удалось отправить {event.value}: {e!r}")
            return False
        return True

    # === INBOUND ===

    async def handle_message(self, raw: str | bytes) -> None:
        """Разобрать кадр сервера и передать обработчику."""
        try:
            message = WireMessage.from_json(raw)
        except ValidationError:
            await log_warning(f"Некорректный кадр от сервера: {str(raw)[:200]}")
            return

        handler = self._handlers.get(message.event)
        if handler is None:
            await log_debug(f"Неизвестное событие сервера: {message.event}")
            return
        await handler(message.data)

    async def apply_snapshot(self, locations: Any) -> None:
        """Сверить карту с полным снимком реестра. Ничего не удаляет."""
        if not isinstance(locations, dict):
            await log_warning(f"Снимок не является объектом: {type(locations).__name__}")
            return

        for marker_id, raw in locations.items():
            try:
                payload = LocationPayload.model_validate(raw)
            except ValidationError:
                await log_warning(f"Пропущена некорректная запись снимка: {marker_id}")
                continue

            state = MarkerState(payload.latitude, payload.longitude, payload.bus_number)
            current = self._markers.get(marker_id)
            if current is None:
                self._renderer.add_marker(marker_id, state.latitude, state.longitude, state.label)
            elif current != state:
                self._renderer.update_marker(marker_id, state.latitude, state.longitude, state.label)
            self._markers[marker_id] = state

    async def remove_marker(self, marker_id: Any) -> None:
        """Удалить маркер отключившегося клиента."""
        if not isinstance(marker_id, str) or marker_id not in self._markers:
            return
        del self._markers[marker_id]
        self._renderer.remove_marker(marker_id)

    async def _on_location_shared(self, bus_number: Any) -> None:
        self._notifier.notify(self._t("BUS_SHARED_LOCATION", bus_number=bus_number))

    # === DRIVER ===

    async def share_location(self, bus_number: str) -> bool:
        """
        Начать передачу геолокации автобуса.

        Пустой номер блокируется уведомлением до любого сетевого вызова.
        После первой отправки координаты повторяются с фиксированным интервалом.

        Returns:
            True если передача началась
        """
        bus = (bus_number or "").strip()
        if not bus:
            self._notifier.notify(self._t("INVALID_BUS_NUMBER"))
            return False
        if self._is_locating:
            return False
        if not self.is_connected:
            self._notifier.notify(self._t("CONNECTION_FAILED"), persistent=True)
            return False

        position = await self._read_position()
        if position is None:
            return False
        latitude, longitude = position

        if not await self.emit(ClientEvent.SEND_LOCATION, _location_data(latitude, longitude, bus)):
            self._notifier.notify(self._t("CONNECTION_FAILED"), persistent=True)
            return False
        await self.emit(ClientEvent.LOCATION_SHARED, bus)

        await self._cancel_share_task()
        self._bus_number = bus
        self._share_task = asyncio.create_task(self._share_loop(bus), name=f"share_location_{bus}")
        await log_info(f"Начата передача геолокации автобуса {bus}")
        return True

    async def stop_sharing(self) -> bool:
        """
        Остановить периодическую передачу.

        Returns:
            False если передача не шла
        """
        bus = self._bus_number
        if bus is None:
            return False

        await self._cancel_share_task()
        self._bus_number = None
        await self.emit(ClientEvent.STOP_LOCATION_SHARING, bus)
        self._notifier.notify(self._t("STOPPED_SHARING", bus_number=bus))
        return True

    async def _share_loop(self, bus: str) -> None:
        """Периодическая отправка координат, пока её не отменят."""
        while True:
            await asyncio.sleep(self._update_interval)
            try:
                latitude, longitude = await self._sensor.get_position()
            except LocationUnavailableError as e:
                await log_warning(f"Геолокация недоступна, пропускаем обновление: {e}")
                continue
            # Пока соединения нет, обновления пропускаются
            await self.emit(ClientEvent.SEND_LOCATION, _location_data(latitude, longitude, bus))

    async def _cancel_share_task(self) -> None:
        task = self._share_task
        self._share_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # === PASSENGER ===

    async def locate_user(self) -> float | None:
        """
        Показать пользователя на карте и сообщить расстояние до ближайшего автобуса.

        Returns:
            Расстояние в км или None
        """
        if self._is_locating:
            return None

        position = await self._read_position()
        if position is None:
            return None
        latitude, longitude = position

        self._renderer.set_view(latitude, longitude)
        self._renderer.show_user_position(latitude, longitude)

        nearest = find_nearest(
            latitude,
            longitude,
            ((mid, m.latitude, m.longitude) for mid, m in self._markers.items()),
        )
        if nearest is None:
            self._notifier.notify(self._t("NO_BUSES"))
            return None

        distance = nearest[1]
        self._notifier.notify(self._t("NEAREST_BUS", distance=distance))
        return distance

    def track_bus(self, bus_number: str | None) -> bool:
        """Центрировать карту на автобусе с этим номером."""
        if not bus_number:
            self._notifier.notify(self._t("SELECT_BUS"))
            return False

        for marker in self._markers.values():
            if marker.label == bus_number:
                self._renderer.set_view(marker.latitude, marker.longitude)
                return True

        self._notifier.notify(self._t("BUS_NOT_FOUND", bus_number=bus_number))
        return False

    def bus_numbers(self) -> list[str]:
        """Номера автобусов на карте, без повторов, в порядке появления."""
        return list(dict.fromkeys(m.label for m in self._markers.values() if m.label))

    async def _read_position(self) -> tuple[float, float] | None:
        self._is_locating = True
        try:
            return await self._sensor.get_position()
        except LocationUnavailableError as e:
            await log_warning(f"Ошибка геолокации: {e}")
            self._notifier.notify(self._t("GEOLOCATION_FAILED"))
            return None
        finally:
            self._is_locating = False


def _location_data(latitude: float, longitude: float, bus_number: str) -> dict[str, Any]:
    return {"latitude": latitude, "longitude": longitude, "busNumber": bus_number}
