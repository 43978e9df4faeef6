# src/shared/__init__.py
"""
Общий код сервера и клиента.

Модули:
- events: конверт сообщений WebSocket протокола
- models: Pydantic-модели геолокации и health
"""

__all__: list[str] = []
