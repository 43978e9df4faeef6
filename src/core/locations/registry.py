# src/core/locations/registry.py
"""
Реестр сессий: соединение -> последняя известная геолокация.

Единственное разделяемое изменяемое состояние сервера.
Изменяется только координатором рассылки.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from src.core.locations.exceptions import InvalidLocationError
from src.shared.models.location_dto import LocationPayload, LocationRecord


class SessionRegistry:
    """
    Реестр последних геолокаций активных соединений.

    Инварианты:
    - ключи — только живые соединения (запись удаляется при отключении)
    - запись появляется только после первой валидной геолокации

    Синхронизация не нужна: все вызовы идут из одного event loop
    и не содержат точек переключения.
    """

    def __init__(self) -> None:
        self._records: dict[str, LocationRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._records

    def upsert(
        self,
        connection_id: str,
        location: LocationPayload | Mapping[str, Any],
    ) -> LocationRecord:
        """
        Вставить или заменить запись соединения.

        Raises:
            InvalidLocationError: нет latitude/longitude или они не числа.
                Реестр при этом не меняется.
        """
        if isinstance(location, LocationPayload):
            payload = location
        elif isinstance(location, Mapping):
            try:
                payload = LocationPayload.model_validate(dict(location))
            except ValidationError as e:
                fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
                raise InvalidLocationError(connection_id, f"bad fields: {fields}") from e
        else:
            raise InvalidLocationError(connection_id, f"expected an object, got {type(location).__name__}")

        record = LocationRecord.from_payload(connection_id, payload)
        self._records[connection_id] = record
        return record

    def remove(self, connection_id: str) -> bool:
        """Удалить запись соединения. Отсутствие записи — не ошибка."""
        return self._records.pop(connection_id, None) is not None

    def get(self, connection_id: str) -> LocationRecord | None:
        """Запись соединения или None."""
        return self._records.get(connection_id)

    def snapshot(self) -> Mapping[str, LocationRecord]:
        """
        Неизменяемая копия реестра на текущий момент.

        Записи заморожены, сам словарь — копия под read-only view,
        поэтому последующие upsert/remove на снимок не влияют.
        """
        return MappingProxyType(dict(self._records))

    def snapshot_wire(self) -> dict[str, dict[str, Any]]:
        """Снимок в формате протокола: {id: {id, latitude, longitude, busNumber}}."""
        return {cid: record.to_wire() for cid, record in self._records.items()}

    def clear(self) -> None:
        """Очистить реестр (остановка сервера)."""
        self._records.clear()
