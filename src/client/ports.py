# src/client/ports.py
"""
Внешние компоненты клиента: карта, датчик геолокации, уведомления.

Клиентский прокси только вызывает их, реализация — на стороне UI.
"""

from __future__ import annotations

from typing import Protocol


class LocationUnavailableError(Exception):
    """Датчик не смог определить геолокацию."""
    pass


class MapRenderer(Protocol):
    """Поверхность карты: маркеры с подписью по идентификатору соединения."""

    def add_marker(self, marker_id: str, latitude: float, longitude: float, label: str | None) -> None: ...

    def update_marker(self, marker_id: str, latitude: float, longitude: float, label: str | None) -> None: ...

    def remove_marker(self, marker_id: str) -> None: ...

    def set_view(self, latitude: float, longitude: float) -> None: ...

    def show_user_position(self, latitude: float, longitude: float) -> None: ...


class LocationSensor(Protocol):
    """Датчик геолокации."""

    async def get_position(self) -> tuple[float, float]:
        """
        Текущие (latitude, longitude).

        Raises:
            LocationUnavailableError: геолокация недоступна
        """
        ...


class Notifier(Protocol):
    """Локальные уведомления пользователю."""

    def notify(self, message: str, persistent: bool = False) -> None: ...
