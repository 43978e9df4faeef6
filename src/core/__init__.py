# src/core/__init__.py
"""
Доменный слой (Core Domain).
Чистая логика, независимая от транспорта.
"""

from src.core.locations import SessionRegistry, LocationError, InvalidLocationError

__all__ = [
    "SessionRegistry",
    "LocationError",
    "InvalidLocationError",
]
