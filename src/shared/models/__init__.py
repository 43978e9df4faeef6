# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели.
"""

from src.shared.models.common import HealthStatus
from src.shared.models.location_dto import LocationPayload, LocationRecord

__all__ = [
    "HealthStatus",
    "LocationPayload",
    "LocationRecord",
]
