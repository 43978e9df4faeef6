# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class UserRole(str, Enum):
    """
    Роли клиентов.

    Роль существует только на стороне клиента (что показывать),
    сервер её не проверяет.
    """
    DRIVER = "driver"
    PASSENGER = "passenger"


class ClientEvent(str, Enum):
    """События client -> server."""
    SEND_LOCATION = "send-location"
    LOCATION_SHARED = "location-shared"
    STOP_LOCATION_SHARING = "stop-location-sharing"


class ServerEvent(str, Enum):
    """События server -> client."""
    INITIAL_LOCATIONS = "initial-locations"
    RECEIVE_LOCATION = "receive-location"
    LOCATION_SHARED = "location-shared"
    USER_DISCONNECTED = "user-disconnected"
