"""Google Places 주변 검색 서비스 테스트."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from eurotrip.services.google_places_service import GooglePlacesService


def _response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def _place(name: str, rating: float | None, price_level: int | None = 2) -> dict:
    return {
        "name": name,
        "vicinity": f"{name} street 1",
        "rating": rating,
        "price_level": price_level,
        "geometry": {"location": {"lat": 46.2, "lng": 6.14}},
        "place_id": f"pid-{name}",
    }


@pytest.mark.asyncio
async def test_filters_by_min_rating_and_maps_fields():
    service = GooglePlacesService(api_key="g-key", min_rating=4.5, radius_meters=5000)
    payload = {"status": "OK", "results": [_place("Top", 4.8), _place("Meh", 4.1), _place("Unrated", None)]}

    with patch("eurotrip.services.google_places_service.requests.Session") as session_cls:
        session = session_cls.return_value.__enter__.return_value
        session.get.return_value = _response(payload)
        places = await service.search_nearby(46.2, 6.14, "fondue")

    assert [place.name for place in places] == ["Top"]
    assert places[0].model_dump(by_alias=True) == {
        "name": "Top",
        "address": "Top street 1",
        "rating": 4.8,
        "priceLevel": 2,
        "location": {"lat": 46.2, "lng": 6.14},
        "placeId": "pid-Top",
    }
    params = session.get.call_args.kwargs["params"]
    assert params == {
        "location": "46.2,6.14",
        "radius": 5000,
        "type": "restaurant",
        "keyword": "fondue",
        "key": "g-key",
    }


@pytest.mark.asyncio
async def test_zero_results_is_empty():
    service = GooglePlacesService(api_key="g-key")

    with patch("eurotrip.services.google_places_service.requests.Session") as session_cls:
        session_cls.return_value.__enter__.return_value.get.return_value = _response({"status": "ZERO_RESULTS"})
        assert await service.search_nearby(46.2, 6.14, "burger") == []


@pytest.mark.asyncio
async def test_error_status_and_transport_failures_return_empty():
    service = GooglePlacesService(api_key="g-key")

    with patch("eurotrip.services.google_places_service.requests.Session") as session_cls:
        session = session_cls.return_value.__enter__.return_value
        session.get.return_value = _response({"status": "REQUEST_DENIED", "error_message": "bad key"})
        assert await service.search_nearby(46.2, 6.14, "burger") == []

        session.get.side_effect = requests.Timeout("slow")
        assert await service.search_nearby(46.2, 6.14, "burger") == []


@pytest.mark.asyncio
async def test_missing_key_skips_request():
    service = GooglePlacesService(api_key=None)

    with patch("eurotrip.services.google_places_service.requests.Session") as session_cls:
        assert await service.search_nearby(46.2, 6.14, "burger") == []

    session_cls.assert_not_called()
