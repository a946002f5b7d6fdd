"""주변 맛집 검색 API."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.schemas.place import PlacesResponse
from eurotrip.services.google_places_service import get_google_places_service
from eurotrip.services.places_service import PlacesServiceProtocol

router = APIRouter(prefix="/api", tags=["places"])
logger = get_logger(__name__)


def get_places_service() -> PlacesServiceProtocol:
    """주변 검색 서비스 인스턴스를 제공합니다."""
    return get_google_places_service()


@router.get("/places", response_model=None)
async def search_places(
    lat: float | None = Query(default=None),
    lng: float | None = Query(default=None),
    query: str | None = Query(default=None),
    places_service: PlacesServiceProtocol = Depends(get_places_service),  # noqa: B008
) -> JSONResponse:
    """좌표 주변의 평점 높은 식당을 반환합니다. 검색 실패 시 빈 목록."""
    if lat is None or lng is None:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "lat and lng are required"})

    keyword = query or get_settings().GOOGLE_PLACES_DEFAULT_QUERY
    places = await places_service.search_nearby(lat, lng, keyword)
    logger.info("Places search completed: query=%s results=%d", keyword, len(places))
    return JSONResponse(content=PlacesResponse(places=places).model_dump(mode="json", by_alias=True))
