# src/common/geo.py
"""
Геометрия на сфере: расстояние между точками и поиск ближайшей.
"""

from __future__ import annotations

import math
from collections.abc import Iterable


EARTH_RADIUS_KM = 6371.0


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Вычисляет расстояние между двумя точками (в км) по формуле Haversine.
    """
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def find_nearest(
    lat: float,
    lon: float,
    points: Iterable[tuple[str, float, float]],
) -> tuple[str, float] | None:
    """
    Ближайшая точка к (lat, lon).

    Args:
        points: Тройки (id, lat, lon)

    Returns:
        (id, расстояние в км) или None, если точек нет
    """
    nearest: tuple[str, float] | None = None
    for point_id, p_lat, p_lon in points:
        distance = calculate_distance(lat, lon, p_lat, p_lon)
        if nearest is None or distance < nearest[1]:
            nearest = (point_id, distance)
    return nearest
