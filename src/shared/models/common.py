# src/shared/models/common.py
"""
Общие модели для HTTP эндпоинтов.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded, unhealthy
    version: str | None = None
    uptime_seconds: float | None = None
