"""Google Places Nearby Search 서비스 구현."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

import requests

from eurotrip.core.config import get_settings
from eurotrip.core.geo import normalize_lat_lng
from eurotrip.core.logger import get_logger
from eurotrip.core.timeout_policy import get_timeout_policy, to_requests_timeout
from eurotrip.schemas.place import NearbyPlace, PlaceLocation
from eurotrip.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

_OK_STATUSES = {"OK", "ZERO_RESULTS"}


class GooglePlacesError(RuntimeError):
    """Google Places 호출 실패 시 발생하는 예외."""


class GooglePlacesService(PlacesServiceProtocol):
    """Google Places Nearby Search 기반 Places 서비스.

    API 키가 없거나 호출이 실패하면 예외 대신 빈 목록을 반환합니다.
    """

    _NEARBY_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

    def __init__(
        self,
        api_key: str | None,
        timeout_seconds: int = 10,
        min_rating: float = 4.5,
        radius_meters: int = 5000,
    ) -> None:
        self._api_key = api_key or ""
        self._timeout_seconds = timeout_seconds
        self._min_rating = min_rating
        self._radius_meters = radius_meters

    @classmethod
    def from_settings(cls) -> GooglePlacesService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        if not settings.GOOGLE_PLACES_API_KEY:
            logger.warning("GOOGLE_PLACES_API_KEY is not configured; nearby search will return no places.")
        return cls(
            api_key=settings.GOOGLE_PLACES_API_KEY,
            timeout_seconds=timeout_policy.google_places_timeout_seconds,
            min_rating=settings.GOOGLE_PLACES_MIN_RATING,
            radius_meters=settings.GOOGLE_PLACES_RADIUS_METERS,
        )

    async def search_nearby(self, lat: float, lng: float, query: str) -> list[NearbyPlace]:
        if not self._api_key:
            return []

        latitude, longitude = normalize_lat_lng(lat, lng)
        params = {
            "location": f"{latitude},{longitude}",
            "radius": self._radius_meters,
            "type": "restaurant",
            "keyword": query,
            "key": self._api_key,
        }
        try:
            data = await self._request(params)
        except GooglePlacesError as exc:
            logger.error("%s", exc)
            return []

        places = [place for place in (self._map_place(item) for item in data.get("results") or []) if place]
        logger.info("Google Places nearby search completed: candidate_count=%d", len(places))
        return places

    async def _request(self, params: dict[str, Any]) -> dict[str, Any]:
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            with requests.Session() as session:
                return session.get(self._NEARBY_URL, params=params, timeout=request_timeout)

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise GooglePlacesError(f"Google Places API error: {status_code}") from exc
        except requests.RequestException as exc:
            raise GooglePlacesError(f"Google Places API request failed: {exc}") from exc
        except ValueError as exc:
            raise GooglePlacesError("Google Places API response parse failed") from exc

        if not isinstance(data, dict):
            raise GooglePlacesError("Google Places API returned an unexpected payload")
        status = data.get("status")
        if status not in _OK_STATUSES:
            raise GooglePlacesError(f"Google Places API status {status}: {data.get('error_message', '')}")
        return data

    def _map_place(self, raw: dict[str, Any]) -> NearbyPlace | None:
        rating = raw.get("rating")
        if not isinstance(rating, (int, float)) or rating < self._min_rating:
            return None

        location = (raw.get("geometry") or {}).get("location") or {}
        name = raw.get("name")
        place_id = raw.get("place_id")
        if not (name and place_id and location.get("lat") is not None and location.get("lng") is not None):
            return None

        return NearbyPlace(
            name=name,
            address=raw.get("vicinity") or "",
            rating=float(rating),
            price_level=raw.get("price_level"),
            location=PlaceLocation(lat=location["lat"], lng=location["lng"]),
            place_id=place_id,
        )


@lru_cache(maxsize=1)
def get_google_places_service() -> GooglePlacesService:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다."""
    return GooglePlacesService.from_settings()
