# src/core/locations/__init__.py
"""
Домен геолокаций.
Реестр последних известных точек активных соединений.
"""

from src.core.locations.exceptions import LocationError, InvalidLocationError
from src.core.locations.registry import SessionRegistry

__all__ = [
    "LocationError",
    "InvalidLocationError",
    "SessionRegistry",
]
