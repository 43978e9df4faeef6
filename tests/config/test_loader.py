# tests/config/test_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.config.loader import (
    get_project_root,
    get_config_path,
    load_config_json,
    SystemSettings,
    LoggingSettings,
    ServerSettings,
    ClientSettings,
    Settings,
)


class TestGetProjectRoot:
    """Тесты для функции get_project_root."""

    def test_returns_path_object(self) -> None:
        """Проверяет, что возвращается объект Path."""
        root = get_project_root()
        assert isinstance(root, Path)

    def test_root_contains_src_directory(self) -> None:
        """Проверяет наличие директории src в корне."""
        root = get_project_root()
        assert (root / "src").exists()

    def test_root_contains_config_directory(self) -> None:
        """Проверяет наличие директории config в корне."""
        root = get_project_root()
        assert (root / "config").exists()


class TestGetConfigPath:
    """Тесты для функции get_config_path."""

    def test_path_ends_with_config_json(self) -> None:
        """Проверяет правильность имени файла."""
        path = get_config_path()
        assert path.name == "config.json"
        assert path.parent.name == "config"


class TestLoadConfigJson:
    """Тесты для функции load_config_json."""

    def test_contains_required_keys(self) -> None:
        """Проверяет наличие обязательных ключей."""
        config = load_config_json()

        required_keys = [
            "PROJECT_NAME",
            "VERSION",
            "LOG_LEVEL",
            "PORT",
            "WS_PATH",
            "SERVER_URL",
            "LOCATION_UPDATE_INTERVAL",
            "RECONNECT_DELAY",
        ]

        for key in required_keys:
            assert key in config, f"Отсутствует ключ: {key}"

    def test_raises_file_not_found(self, tmp_path: Path) -> None:
        """Проверяет исключение при отсутствии файла."""
        with patch("src.config.loader.get_config_path") as mock_path:
            mock_path.return_value = tmp_path / "nonexistent.json"

            with pytest.raises(FileNotFoundError):
                load_config_json()


class TestSectionModels:
    """Тесты для моделей секций."""

    def test_system_defaults(self) -> None:
        settings = SystemSettings()

        assert settings.PROJECT_NAME == "bus_tracker"
        assert settings.DEBUG is False
        assert settings.ENVIRONMENT == "development"

    def test_logging_defaults(self) -> None:
        settings = LoggingSettings()

        assert settings.LOG_TO_FILE is False
        assert settings.LOG_FORMAT == "colored"
        assert settings.LOG_MAX_BYTES == 10485760

    def test_logging_rejects_unknown_format(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(LOG_FORMAT="xml")

    def test_server_defaults(self) -> None:
        """Порт по умолчанию — 3000."""
        settings = ServerSettings()

        assert settings.PORT == 3000
        assert settings.WS_PATH == "/ws"
        assert settings.SEND_QUEUE_SIZE == 256

    @pytest.mark.parametrize("port", [0, 70000])
    def test_server_rejects_bad_port(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ServerSettings(PORT=port)

    def test_client_defaults(self) -> None:
        """Интервал передачи 2 с, пауза переподключения 5 с."""
        settings = ClientSettings()

        assert settings.LOCATION_UPDATE_INTERVAL == 2.0
        assert settings.RECONNECT_DELAY == 5.0
        assert settings.LANGUAGE == "en"

    def test_client_rejects_zero_interval(self) -> None:
        with pytest.raises(ValidationError):
            ClientSettings(LOCATION_UPDATE_INTERVAL=0)


class TestSettings:
    """Тесты для главного класса Settings."""

    def test_from_config_json(self) -> None:
        """Проверяет создание настроек из config.json."""
        settings = Settings.from_config_json()

        assert settings.system.PROJECT_NAME == "bus_tracker"
        assert settings.server.WS_PATH == "/ws"
        assert settings.client.LOCATION_UPDATE_INTERVAL > 0

    def test_from_dict(self, mock_config: dict[str, Any], monkeypatch: pytest.MonkeyPatch) -> None:
        """Плоский словарь раскладывается по секциям, комментарии отбрасываются."""
        for name in ("ENVIRONMENT", "HOST", "PORT", "SERVER_URL"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_dict(mock_config)

        assert settings.system.PROJECT_NAME == "bus_tracker_test"
        assert settings.system.ENVIRONMENT == "test"
        assert settings.logging.LOG_FORMAT == "json"
        assert settings.server.HOST == "127.0.0.1"
        assert settings.server.PORT == 3100
        assert settings.server.SEND_QUEUE_SIZE == 16
        assert settings.client.SERVER_URL == "ws://127.0.0.1:3100/ws"
        assert settings.client.RECONNECT_DELAY == 1.0
        assert settings.client.LANGUAGE == "ru"

    def test_env_overrides(self, mock_config: dict[str, Any]) -> None:
        """PORT, HOST и SERVER_URL из окружения важнее config.json."""
        env = {"PORT": "8080", "HOST": "10.0.0.1", "SERVER_URL": "ws://bus.example/ws"}
        with patch.dict(os.environ, env):
            settings = Settings.from_dict(mock_config)

        assert settings.server.PORT == 8080
        assert settings.server.HOST == "10.0.0.1"
        assert settings.client.SERVER_URL == "ws://bus.example/ws"

    def test_missing_keys_use_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)

        settings = Settings.from_dict({})

        assert settings.server.PORT == 3000
        assert settings.client.LANGUAGE == "en"

    def test_filters_comment_keys(self, tmp_path: Path, mock_config: dict[str, Any]) -> None:
        """Проверяет фильтрацию комментариев в config.json."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(mock_config), encoding="utf-8")

        with patch("src.config.loader.get_config_path") as mock_path:
            mock_path.return_value = config_file

            settings = Settings.from_config_json()
            assert settings.system.VERSION == "1.0.0-test"
