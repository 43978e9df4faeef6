# src/client/__init__.py
"""
Клиент водителя/пассажира: протокольная часть без UI.
"""

from src.client.ports import LocationSensor, LocationUnavailableError, MapRenderer, Notifier
from src.client.proxy import ClientSessionProxy, MarkerState

__all__ = [
    "ClientSessionProxy",
    "MarkerState",
    "MapRenderer",
    "LocationSensor",
    "Notifier",
    "LocationUnavailableError",
]
