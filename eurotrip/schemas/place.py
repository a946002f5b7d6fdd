"""주변 장소 검색 스키마."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PlaceLocation(BaseModel):
    lat: float
    lng: float


class NearbyPlace(BaseModel):
    """주변 검색 결과 장소.

    응답 JSON 키는 camelCase(`priceLevel`, `placeId`)로 직렬화됩니다.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="장소 이름")
    address: str = Field(default="", description="주소 (vicinity)")
    rating: float = Field(..., description="평점")
    price_level: int | None = Field(default=None, alias="priceLevel", description="가격대 (0~4)")
    location: PlaceLocation = Field(..., description="좌표")
    place_id: str = Field(..., alias="placeId", description="Google place_id")


class PlacesResponse(BaseModel):
    places: list[NearbyPlace] = Field(default_factory=list)
