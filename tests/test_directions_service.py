"""Mapbox 경로 조회 서비스 테스트."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from eurotrip.schemas.trip import Coordinates
from eurotrip.services.directions_service import DirectionsError, MapboxDirectionsService

ZURICH = Coordinates(lat=47.37, lng=8.54)
LUCERNE = Coordinates(lat=47.05, lng=8.31)
OSLO = Coordinates(lat=59.91, lng=10.75)
COPENHAGEN = Coordinates(lat=55.68, lng=12.57)


def _response(payload: dict, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def _route(distance_m: float, duration_s: float, modes: list[str]) -> dict:
    return {
        "code": "Ok",
        "routes": [
            {
                "distance": distance_m,
                "duration": duration_s,
                "geometry": {"coordinates": [[8.54, 47.37], [8.4, 47.2], [8.31, 47.05]]},
                "legs": [{"steps": [{"mode": mode} for mode in modes]}],
            }
        ],
    }


@pytest.mark.asyncio
async def test_maps_driving_route():
    service = MapboxDirectionsService("pk.test")

    with patch("eurotrip.services.directions_service.requests.get") as mock_get:
        mock_get.return_value = _response(_route(52_000, 2_880, ["driving", "driving"]))
        segment = await service.fetch_segment(ZURICH, LUCERNE)

    assert segment.distance_km == 52.0
    assert segment.duration_hours == 0.8
    assert segment.geometry[0] == (8.54, 47.37)
    assert segment.is_ferry is None

    url = mock_get.call_args.args[0]
    params = mock_get.call_args.kwargs["params"]
    assert url.endswith("/8.54,47.37;8.31,47.05")
    assert params["geometries"] == "geojson"
    assert params["overview"] == "full"
    assert params["access_token"] == "pk.test"


@pytest.mark.asyncio
async def test_ferry_step_marks_segment():
    service = MapboxDirectionsService("pk.test")

    with patch("eurotrip.services.directions_service.requests.get") as mock_get:
        mock_get.return_value = _response(_route(600_000, 30_000, ["driving", "ferry"]))
        segment = await service.fetch_segment(OSLO, COPENHAGEN)

    assert segment.is_ferry is True
    assert len(segment.geometry) == 3


@pytest.mark.asyncio
async def test_long_water_detour_becomes_straight_line():
    service = MapboxDirectionsService("pk.test")

    with patch("eurotrip.services.directions_service.requests.get") as mock_get:
        mock_get.return_value = _response(_route(2_500_000, 90_000, ["driving"]))
        segment = await service.fetch_segment(OSLO, COPENHAGEN)

    assert segment.is_ferry is True
    assert segment.geometry == [(10.75, 59.91), (12.57, 55.68)]
    assert segment.distance_km is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        _response({"code": "NoRoute", "routes": []}),
        _response({"message": "Not Authorized"}, status_code=401),
    ],
)
async def test_failures_raise_directions_error(response):
    service = MapboxDirectionsService("pk.test")

    with patch("eurotrip.services.directions_service.requests.get", return_value=response):
        with pytest.raises(DirectionsError):
            await service.fetch_segment(ZURICH, LUCERNE)


@pytest.mark.asyncio
async def test_transport_failure_raises_directions_error():
    service = MapboxDirectionsService("pk.test")

    with patch(
        "eurotrip.services.directions_service.requests.get",
        side_effect=requests.ConnectionError("offline"),
    ):
        with pytest.raises(DirectionsError, match="request failed"):
            await service.fetch_segment(ZURICH, LUCERNE)


def test_missing_token_is_rejected():
    with pytest.raises(DirectionsError):
        MapboxDirectionsService("")
