"""구간 계산을 위한 지리 유틸리티."""

from __future__ import annotations

import math

_EARTH_RADIUS_KM = 6371.0
_MIN_LAT = -90.0
_MAX_LAT = 90.0
_MIN_LNG = -180.0
_MAX_LNG = 180.0


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def normalize_lat_lng(latitude: float, longitude: float) -> tuple[float, float]:
    """위경도를 유효 범위로 보정합니다."""
    return _clamp(float(latitude), _MIN_LAT, _MAX_LAT), _clamp(float(longitude), _MIN_LNG, _MAX_LNG)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 좌표 간 직선 거리(km)를 반환합니다."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return _EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def straight_line(lat1: float, lng1: float, lat2: float, lng2: float) -> list[tuple[float, float]]:
    """두 지점을 잇는 `(lng, lat)` 순서의 직선 geometry를 만듭니다."""
    return [(float(lng1), float(lat1)), (float(lng2), float(lat2))]
