# src/client/console.py
"""
Консольные реализации карты, датчика и уведомлений.

Используются entrypoint-ом клиента для ручной проверки без браузера.
"""

from __future__ import annotations

from src.client.ports import LocationUnavailableError
from src.common.logger import get_logger


logger = get_logger("bus_tracker.client")


class ConsoleMapRenderer:
    """Печатает изменения карты в лог."""

    def add_marker(self, marker_id: str, latitude: float, longitude: float, label: str | None) -> None:
        logger.info(f"+ автобус {label or '?'} [{marker_id[:8]}] {latitude:.6f}, {longitude:.6f}")

    def update_marker(self, marker_id: str, latitude: float, longitude: float, label: str | None) -> None:
        logger.info(f"~ автобус {label or '?'} [{marker_id[:8]}] {latitude:.6f}, {longitude:.6f}")

    def remove_marker(self, marker_id: str) -> None:
        logger.info(f"- [{marker_id[:8]}] отключился")

    def set_view(self, latitude: float, longitude: float) -> None:
        logger.info(f"Центр карты: {latitude:.6f}, {longitude:.6f}")

    def show_user_position(self, latitude: float, longitude: float) -> None:
        logger.info(f"Вы здесь: {latitude:.6f}, {longitude:.6f}")


class FixedPositionSensor:
    """Датчик, всегда возвращающий заданную точку."""

    def __init__(self, latitude: float | None, longitude: float | None) -> None:
        self._position = (latitude, longitude)

    async def get_position(self) -> tuple[float, float]:
        latitude, longitude = self._position
        if latitude is None or longitude is None:
            raise LocationUnavailableError("координаты не заданы")
        return latitude, longitude


class ConsoleNotifier:
    """Уведомления в лог; постоянные — уровнем WARNING."""

    def notify(self, message: str, persistent: bool = False) -> None:
        if persistent:
            logger.warning(message)
        else:
            logger.info(message)
