# src/core/locations/exceptions.py
"""Исключения домена геолокаций."""


class LocationError(Exception):
    """Базовое исключение домена геолокаций."""
    pass


class InvalidLocationError(LocationError):
    """Геолокация без координат или с нечисловыми координатами."""

    def __init__(self, connection_id: str, reason: str) -> None:
        self.connection_id = connection_id
        self.reason = reason
        super().__init__(f"Invalid location from {connection_id}: {reason}")
