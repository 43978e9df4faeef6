# src/shared/models/location_dto.py
"""
Модели геолокации автобуса.

LocationPayload — то, что присылает водитель в send-location.
LocationRecord — последняя известная точка соединения в реестре.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_coordinate(value: Any) -> float:
    """Координата должна быть конечным числом (bool числом не считается)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("coordinate must be a number")
    try:
        result = float(value)
    except OverflowError:
        raise ValueError("coordinate is out of float range") from None
    if not math.isfinite(result):
        raise ValueError("coordinate must be finite")
    return result


class LocationPayload(BaseModel):
    """Входящая геолокация от водителя."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    latitude: float
    longitude: float
    bus_number: str | None = Field(default=None, alias="busNumber")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def validate_coordinate(cls, v: Any) -> float:
        return _check_coordinate(v)

    @field_validator("bus_number", mode="before")
    @classmethod
    def coerce_bus_number(cls, v: Any) -> str | None:
        """Номер автобуса — произвольная метка, числа приводим к строке."""
        if v is None or isinstance(v, str):
            return v
        return str(v)


class LocationRecord(LocationPayload):
    """Запись реестра: геолокация, привязанная к соединению."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str

    @classmethod
    def from_payload(cls, connection_id: str, payload: LocationPayload) -> "LocationRecord":
        """Привязывает входящую геолокацию к соединению."""
        return cls(
            id=connection_id,
            latitude=payload.latitude,
            longitude=payload.longitude,
            bus_number=payload.bus_number,
        )

    def to_wire(self) -> dict[str, Any]:
        """Словарь для отправки клиенту (camelCase, как в протоколе)."""
        return self.model_dump(by_alias=True)
