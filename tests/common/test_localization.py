# tests/common/test_localization.py
"""
Тесты для модуля локализации.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from src.common.localization import (
    get_lang_dict_path,
    load_lang_dict,
    get_text,
    get_available_languages,
)


@pytest.fixture(autouse=True)
def clear_lang_cache():
    """Кэш словаря сбрасывается до и после теста, чтобы мок не утёк дальше."""
    load_lang_dict.cache_clear()
    yield
    load_lang_dict.cache_clear()


@pytest.fixture
def temp_lang_dict_file(tmp_path: Path) -> Path:
    """Временный lang_dict.json."""
    lang_dict = {
        "BUS_SHARED_LOCATION": {
            "en": "Bus {bus_number} has shared its location!",
            "ru": "Автобус {bus_number} поделился своим местоположением!",
        },
        "ONLY_RUSSIAN": {"ru": "Только на русском"},
    }
    lang_file = tmp_path / "lang_dict.json"
    lang_file.write_text(json.dumps(lang_dict, ensure_ascii=False), encoding="utf-8")
    return lang_file


class TestGetLangDictPath:
    """Тесты для функции get_lang_dict_path."""

    def test_path_ends_with_lang_dict_json(self) -> None:
        """Проверяет правильность имени файла."""
        path = get_lang_dict_path()
        assert isinstance(path, Path)
        assert path.name == "lang_dict.json"
        assert path.parent.name == "config"


class TestLoadLangDict:
    """Тесты для функции load_lang_dict."""

    def test_every_key_has_english(self) -> None:
        """У каждого ключа есть английский текст."""
        lang_dict = load_lang_dict()

        for key, translations in lang_dict.items():
            assert "en" in translations, f"Нет перевода en для {key}"

    def test_raises_file_not_found(self, tmp_path: Path) -> None:
        """Проверяет исключение при отсутствии файла."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = tmp_path / "nonexistent.json"

            with pytest.raises(FileNotFoundError):
                load_lang_dict()


class TestGetText:
    """Тесты для функции get_text."""

    def test_real_notification_texts(self) -> None:
        """Тексты уведомлений клиента."""
        assert get_text("INVALID_BUS_NUMBER", "en") == "Please enter a valid bus number."
        assert get_text("BUS_SHARED_LOCATION", "en", bus_number="7") == "Bus 7 has shared its location!"
        assert get_text("NEAREST_BUS", "en", distance=1.23456) == "Nearest bus is 1.23 kilometers away."

    def test_languages(self, temp_lang_dict_file: Path) -> None:
        """Проверяет получение текста на разных языках."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = temp_lang_dict_file

            assert get_text("BUS_SHARED_LOCATION", "en", bus_number="7") == "Bus 7 has shared its location!"
            assert get_text("BUS_SHARED_LOCATION", "ru", bus_number="7") == (
                "Автобус 7 поделился своим местоположением!"
            )

    def test_unknown_language_falls_back_to_english(self, temp_lang_dict_file: Path) -> None:
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = temp_lang_dict_file

            assert get_text("BUS_SHARED_LOCATION", "de", bus_number="7") == "Bus 7 has shared its location!"

    def test_falls_back_to_any_language(self, temp_lang_dict_file: Path) -> None:
        """Нет ни запрошенного языка, ни английского — берётся первый доступный."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = temp_lang_dict_file

            assert get_text("ONLY_RUSSIAN", "en") == "Только на русском"

    def test_missing_key_returns_placeholder(self, temp_lang_dict_file: Path) -> None:
        """Проверяет возврат плейсхолдера при отсутствии ключа."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = temp_lang_dict_file

            assert get_text("NONEXISTENT_KEY", "en") == "[NONEXISTENT_KEY]"
            assert get_text("NONEXISTENT_KEY", "en", default="Текст") == "Текст"

    def test_missing_format_key(self, temp_lang_dict_file: Path) -> None:
        """Отсутствующий параметр форматирования оставляет плейсхолдер."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = temp_lang_dict_file

            result = get_text("BUS_SHARED_LOCATION", "en", other="x")
            assert "{bus_number}" in result


class TestGetAvailableLanguages:
    """Тесты для функции get_available_languages."""

    def test_contains_expected_languages(self) -> None:
        languages = get_available_languages()

        assert "en" in languages
        assert "ru" in languages
