# src/shared/events/base.py
"""
Конверт сообщений WebSocket протокола.

Каждый кадр — JSON вида {"event": "<имя>", "data": <payload>}.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class WireMessage(BaseModel):
    """Одно сообщение протокола в любую сторону."""

    model_config = ConfigDict(frozen=True)

    event: str
    data: Any = None

    def to_json(self) -> str:
        """Сериализует сообщение в JSON."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str | bytes) -> "WireMessage":
        """Десериализует сообщение из JSON."""
        return cls.model_validate_json(data)
