# src/services/__init__.py
"""
Сервисы приложения.

Сервисы:
- realtime_ws: WebSocket gateway, реестр и рассылка геолокаций
"""

__all__: list[str] = []
