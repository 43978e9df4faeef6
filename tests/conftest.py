# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("PORT", "3000")
os.environ.setdefault("SERVER_URL", "ws://testserver/ws")


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок config.json для тестов."""
    return {
        "_comment_system": "комментарий",
        "PROJECT_NAME": "bus_tracker_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "LOG_MAX_BYTES": 1024,
        "HOST": "127.0.0.1",
        "PORT": 3100,
        "WS_PATH": "/ws",
        "SEND_QUEUE_SIZE": 16,
        "SERVER_URL": "ws://127.0.0.1:3100/ws",
        "LOCATION_UPDATE_INTERVAL": 0.5,
        "RECONNECT_DELAY": 1.0,
        "LANGUAGE": "ru",
    }


# =============================================================================
# ФИКСТУРЫ WEBSOCKET (МОКИ)
# =============================================================================

@pytest.fixture
def make_websocket():
    """Фабрика мок-объектов fastapi.WebSocket."""
    def _make() -> AsyncMock:
        ws = AsyncMock()
        ws.accept = AsyncMock(return_value=None)
        ws.send_json = AsyncMock(return_value=None)
        ws.close = AsyncMock(return_value=None)
        return ws
    return _make


@pytest.fixture
def sent_events():
    """Функция: список (event, data), отправленных в мок-сокет."""
    def _events(ws: AsyncMock) -> list[tuple[str, Any]]:
        return [(c.args[0]["event"], c.args[0]["data"]) for c in ws.send_json.call_args_list]
    return _events


# =============================================================================
# ФИКСТУРЫ КЛИЕНТА
# =============================================================================

@pytest.fixture
def mock_renderer() -> MagicMock:
    """Мок поверхности карты."""
    return MagicMock()


@pytest.fixture
def mock_notifier() -> MagicMock:
    """Мок уведомлений."""
    return MagicMock()


@pytest.fixture
def mock_sensor() -> AsyncMock:
    """Мок датчика геолокации."""
    sensor = AsyncMock()
    sensor.get_position = AsyncMock(return_value=(23.829195, 91.278194))
    return sensor


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def sample_location() -> dict[str, Any]:
    """Пример геолокации водителя."""
    return {"latitude": 10.0, "longitude": 20.0, "busNumber": "7"}
