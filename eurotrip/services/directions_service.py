"""Mapbox Directions API 경로 조회 서비스."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

import requests

from eurotrip.core.config import get_settings
from eurotrip.core.geo import haversine_km, straight_line
from eurotrip.core.logger import get_logger
from eurotrip.core.timeout_policy import get_timeout_policy, to_requests_timeout
from eurotrip.schemas.trip import Coordinates, RouteSegment

logger = get_logger(__name__)

# 직선 거리 대비 운전 거리가 이 배수를 넘으면 물길을 돌아간 경로로 봅니다.
_WATER_DETOUR_RATIO = 3.0
_WATER_DETOUR_MIN_KM = 50.0


class DirectionsError(RuntimeError):
    """경로 조회 실패 시 발생하는 예외."""


class MapboxDirectionsService:
    """두 좌표 사이 운전 경로를 조회해 RouteSegment로 변환합니다.

    반환되는 구간의 `from_stop_id`/`to_stop_id`는 비어 있으며 호출 측이 채웁니다.
    """

    def __init__(
        self,
        token: str,
        timeout_seconds: int = 10,
        base_url: str = "https://api.mapbox.com/directions/v5/mapbox/driving",
    ) -> None:
        if not token:
            raise DirectionsError("MAPBOX_TOKEN is not configured.")
        self._token = token
        self._timeout_seconds = timeout_seconds
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> MapboxDirectionsService:
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        return cls(
            token=settings.MAPBOX_TOKEN or "",
            timeout_seconds=timeout_policy.directions_timeout_seconds,
            base_url=settings.MAPBOX_DIRECTIONS_URL,
        )

    def _build_url(self, origin: Coordinates, destination: Coordinates) -> str:
        return f"{self._base_url}/{origin.lng},{origin.lat};{destination.lng},{destination.lat}"

    async def fetch_segment(self, origin: Coordinates, destination: Coordinates) -> RouteSegment:
        """운전 경로를 조회합니다.

        Raises:
            DirectionsError: 전송 실패, 2xx가 아닌 응답, 경로 없음.
        """
        url = self._build_url(origin, destination)
        params = {
            "geometries": "geojson",
            "overview": "full",
            "steps": "true",
            "access_token": self._token,
        }
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            return requests.get(url, params=params, timeout=request_timeout)

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise DirectionsError(f"Mapbox Directions API error: {status_code}") from exc
        except requests.RequestException as exc:
            raise DirectionsError(f"Mapbox Directions API request failed: {exc}") from exc
        except ValueError as exc:
            raise DirectionsError("Mapbox Directions API response parse failed") from exc

        return self._map_route(data, origin, destination)

    def _map_route(self, data: dict[str, Any], origin: Coordinates, destination: Coordinates) -> RouteSegment:
        routes = data.get("routes") or []
        code = data.get("code")
        if code != "Ok" or not routes:
            raise DirectionsError(f"Mapbox Directions API returned no routes (code: {code})")

        route = routes[0]
        has_ferry_step = any(
            step.get("mode") == "ferry"
            for leg in route.get("legs") or []
            for step in leg.get("steps") or []
        )

        straight_km = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
        driving_km = float(route.get("distance") or 0.0) / 1000.0
        is_water_detour = straight_km > _WATER_DETOUR_MIN_KM and driving_km > straight_km * _WATER_DETOUR_RATIO

        if is_water_detour and not has_ferry_step:
            logger.info("Water detour detected (straight=%.1fkm driving=%.1fkm)", straight_km, driving_km)
            return RouteSegment(
                from_stop_id="",
                to_stop_id="",
                geometry=straight_line(origin.lat, origin.lng, destination.lat, destination.lng),
                is_ferry=True,
            )

        coordinates = (route.get("geometry") or {}).get("coordinates") or []
        return RouteSegment(
            from_stop_id="",
            to_stop_id="",
            geometry=[(float(point[0]), float(point[1])) for point in coordinates],
            distance_km=driving_km,
            duration_hours=float(route.get("duration") or 0.0) / 3600.0,
            is_ferry=True if has_ferry_step else None,
        )


@lru_cache(maxsize=1)
def get_directions_service() -> MapboxDirectionsService | None:
    """설정된 토큰으로 경로 서비스를 반환합니다. 토큰이 없으면 None."""
    settings = get_settings()
    if not settings.MAPBOX_TOKEN:
        logger.warning("MAPBOX_TOKEN is not configured; route segments will not be fetched.")
        return None
    return MapboxDirectionsService.from_settings()
