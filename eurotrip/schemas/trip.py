"""여행 문서(TripDocument) 스키마."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from eurotrip.schemas.enums import AccommodationType, ActivityCategory, BurgerRarity


class Coordinates(BaseModel):
    """정류지 좌표."""

    lat: float = Field(..., description="위도")
    lng: float = Field(..., description="경도")


class Activity(BaseModel):
    """정류지 활동.

    `cost_estimate`는 1인 기준이 아닌 일행 전체 합계 금액입니다.
    """

    name: str = Field(..., description="활동 이름")
    description: str | None = Field(default=None, description="활동 설명")
    duration_hours: float | None = Field(default=None, description="소요 시간")
    cost_estimate: float | None = Field(default=None, description="일행 전체 예상 비용")
    category: ActivityCategory | None = Field(default=None, description="활동 카테고리")
    specialty: str | None = Field(default=None, description="대표 메뉴 (특화 카테고리 전용)")
    address: str | None = Field(default=None, description="주소 (특화 카테고리 전용)")
    time: str | None = Field(default=None, description="추천 시간대 (특화 카테고리 전용)")


class Accommodation(BaseModel):
    """정류지 숙소."""

    name: str = Field(..., description="숙소 이름")
    type: AccommodationType = Field(default=AccommodationType.OTHER, description="숙소 유형")
    cost_per_night: float | None = Field(default=None, description="1박 비용")
    notes: str | None = Field(default=None, description="메모")


class Stop(BaseModel):
    """여행 경로상의 정류지.

    `id`는 생성 시 한 번 부여되며 재사용되지 않습니다. 빈 문자열은 아직
    식별자가 없다는 뜻이며 리듀서가 채웁니다.
    """

    id: str = Field(default="", description="정류지 식별자")
    name: str = Field(..., description="표시 이름")
    coordinates: Coordinates = Field(..., description="좌표")
    country: str | None = Field(default=None, description="국가명")
    nights: int = Field(default=1, description="숙박 수")
    activities: list[Activity] = Field(default_factory=list, description="활동 목록")
    accommodation: Accommodation | None = Field(default=None, description="숙소")
    daily_budget: float | None = Field(default=None, description="일일 예산")
    notes: str | None = Field(default=None, description="메모")


class RouteSegment(BaseModel):
    """연속한 두 정류지 사이의 파생 경로 구간.

    geometry가 없으면 경로 미확인 상태이며, 직선 geometry와 `is_ferry`는
    조회 실패 또는 해상 구간 대체값입니다.
    """

    from_stop_id: str = Field(..., description="출발 정류지 id")
    to_stop_id: str = Field(..., description="도착 정류지 id")
    geometry: list[tuple[float, float]] | None = Field(default=None, description="(lng, lat) 좌표열")
    distance_km: float | None = Field(default=None, description="거리(km)")
    duration_hours: float | None = Field(default=None, description="소요 시간(h)")
    is_ferry: bool | None = Field(default=None, description="페리/간접 구간 여부")


class BurgerAchievement(BaseModel):
    """버거 챌린지 수집 기록."""

    city: str
    restaurant_name: str
    specialty: str | None = None
    rarity: BurgerRarity = BurgerRarity.COMMON
    collected: bool = True


class TripMetadata(BaseModel):
    """여행 단위 메타데이터. 병합 패치로만 변경됩니다."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(default="", description="여행 이름")
    start_date: str | None = Field(default=None, description="시작일 (YYYY-MM-DD)")
    end_date: str | None = Field(default=None, description="종료일 (YYYY-MM-DD)")
    travelers: int | None = Field(default=None, description="여행 인원")
    total_budget: float | None = Field(default=None, description="총 예산")
    currency: str | None = Field(default=None, description="통화 코드")
    mode: str | None = Field(default=None, description="여행 모드 태그")
    food_query: str | None = Field(default=None, description="음식 장소 검색어")
    burger_score: int | None = Field(default=None, description="버거 챌린지 점수")
    burgers_collected: list[BurgerAchievement] | None = Field(default=None, description="버거 챌린지 수집 목록")


class TripDocument(BaseModel):
    """클라이언트 측 여행 상태 루트 문서."""

    metadata: TripMetadata = Field(default_factory=TripMetadata)
    stops: list[Stop] = Field(default_factory=list)
    route_segments: list[RouteSegment] = Field(default_factory=list)
    selected_stop_id: str | None = Field(default=None)

    def find_stop(self, stop_id: str) -> Stop | None:
        return next((stop for stop in self.stops if stop.id == stop_id), None)

    def find_stop_by_name(self, name: str) -> Stop | None:
        """대소문자를 구분하지 않는 완전 일치로 정류지를 찾습니다."""
        lowered = name.lower()
        return next((stop for stop in self.stops if stop.name.lower() == lowered), None)

    def stop_names(self) -> list[str]:
        return [stop.name for stop in self.stops]
