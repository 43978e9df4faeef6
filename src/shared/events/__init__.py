# src/shared/events/__init__.py
"""
Схемы сообщений WebSocket протокола.

Имена событий — в src.common.constants (ClientEvent, ServerEvent).
"""

from src.shared.events.base import WireMessage

__all__ = ["WireMessage"]
