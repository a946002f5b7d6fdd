"""느슨한 타입의 도구 입력을 도구별 입력 변형으로 변환합니다.

모델이 생성한 JSON은 신뢰하지 않고 필드 단위로 보정합니다.
누락된 값은 기본값을 쓰고, 타입이 맞지 않는 값은 무시합니다.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Union

from eurotrip.core.logger import get_logger
from eurotrip.schemas.enums import AccommodationType, ActivityCategory
from eurotrip.schemas.trip import Accommodation, Activity, Coordinates, Stop
from eurotrip.tools import definitions as tool_names

logger = get_logger(__name__)


def as_number(value: Any) -> float | int | None:
    """JSON 숫자만 허용합니다. bool과 NaN은 무시합니다."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def as_int(value: Any) -> int | None:
    number = as_number(value)
    return int(number) if number is not None else None


def as_text(value: Any) -> str | None:
    """비어 있지 않은 문자열(또는 숫자)을 문자열로 반환합니다."""
    if isinstance(value, str):
        return value or None
    if as_number(value) is not None:
        return str(value)
    return None


def as_list(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coordinate(value: Any) -> float:
    number = as_number(value)
    if number is None and isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            number = None
    return float(number) if number is not None and math.isfinite(number) else 0.0


def coerce_category(value: Any) -> ActivityCategory | None:
    try:
        return ActivityCategory(value)
    except ValueError:
        return None


def coerce_activities(raw: Any) -> list[Activity]:
    activities: list[Activity] = []
    for item in as_list(raw) or []:
        if not isinstance(item, dict):
            continue
        activities.append(
            Activity(
                name=as_text(item.get("name")) or "",
                description=as_text(item.get("description")),
                duration_hours=as_number(item.get("duration_hours")),
                cost_estimate=as_number(item.get("cost_estimate")),
                category=coerce_category(item.get("category")),
            )
        )
    return activities


def coerce_accommodation(raw: Any) -> Accommodation | None:
    """이름이 없는 숙소는 버립니다. 알 수 없는 유형은 `other`로 둡니다."""
    data = as_dict(raw)
    name = as_text(data.get("name"))
    if not name:
        return None
    try:
        accommodation_type = AccommodationType(data.get("type"))
    except ValueError:
        accommodation_type = AccommodationType.OTHER
    return Accommodation(
        name=name,
        type=accommodation_type,
        cost_per_night=as_number(data.get("cost_per_night")),
        notes=as_text(data.get("notes")),
    )


def coerce_stop(raw: dict[str, Any]) -> Stop:
    """정류지 입력을 id 없는 Stop으로 변환합니다."""
    lat_raw, lng_raw = raw.get("lat"), raw.get("lng")
    if as_number(lat_raw) is None or as_number(lng_raw) is None:
        logger.warning("Stop %r has non-numeric coordinates: lat=%r lng=%r", raw.get("name"), lat_raw, lng_raw)

    nights = as_int(raw.get("nights"))
    return Stop(
        name=as_text(raw.get("name")) or "",
        coordinates=Coordinates(lat=_coordinate(lat_raw), lng=_coordinate(lng_raw)),
        country=as_text(raw.get("country")),
        nights=nights if nights else 1,
        activities=coerce_activities(raw.get("activities")),
        accommodation=coerce_accommodation(raw.get("accommodation")),
        daily_budget=as_number(raw.get("daily_budget")),
        notes=as_text(raw.get("notes")),
    )


@dataclass(frozen=True, slots=True)
class SetRouteInput:
    stops: list[Stop]
    trip_name: str | None = None
    start_date: str | None = None
    travelers: int | None = None
    total_budget: float | None = None


@dataclass(frozen=True, slots=True)
class AddStopInput:
    stop: Stop
    position: int | None = None


@dataclass(frozen=True, slots=True)
class StopReferenceInput:
    name: str


@dataclass(frozen=True, slots=True)
class UpdateStopInput:
    name: str
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ReorderStopsInput:
    stop_names: list[str] | None


@dataclass(frozen=True, slots=True)
class UpdateTripInput:
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RecommendationItem:
    restaurant_name: str
    specialty: str | None = None
    address: str | None = None
    cost_per_person: float | None = None
    time_suggestion: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class StopRecommendations:
    stop_name: str
    items: list[RecommendationItem]


@dataclass(frozen=True, slots=True)
class RecommendationsInput:
    recommendations: list[StopRecommendations]


ToolInput = Union[
    SetRouteInput,
    AddStopInput,
    StopReferenceInput,
    UpdateStopInput,
    ReorderStopsInput,
    UpdateTripInput,
    RecommendationsInput,
]

# update_trip이 병합할 수 있는 메타데이터 필드
TRIP_TEXT_FIELDS = ("name", "start_date", "end_date", "currency", "food_query")


def parse_set_route(raw: dict[str, Any]) -> SetRouteInput:
    stops = [coerce_stop(item) for item in as_list(raw.get("stops")) or [] if isinstance(item, dict)]
    return SetRouteInput(
        stops=stops,
        trip_name=as_text(raw.get("trip_name")),
        start_date=as_text(raw.get("start_date")),
        travelers=as_int(raw.get("travelers")),
        total_budget=as_number(raw.get("total_budget")),
    )


def parse_add_stop(raw: dict[str, Any]) -> AddStopInput:
    return AddStopInput(stop=coerce_stop(raw), position=as_int(raw.get("position")))


def parse_stop_reference(raw: dict[str, Any]) -> StopReferenceInput:
    return StopReferenceInput(name=as_text(raw.get("name")) or "")


def parse_update_stop(raw: dict[str, Any]) -> UpdateStopInput:
    updates: dict[str, Any] = {}
    nights = as_int(raw.get("nights"))
    if nights is not None:
        updates["nights"] = nights
    if raw.get("activities"):
        updates["activities"] = coerce_activities(raw.get("activities"))
    accommodation = coerce_accommodation(raw.get("accommodation"))
    if accommodation is not None:
        updates["accommodation"] = accommodation
    daily_budget = as_number(raw.get("daily_budget"))
    if daily_budget is not None:
        updates["daily_budget"] = daily_budget
    notes = as_text(raw.get("notes"))
    if notes:
        updates["notes"] = notes
    return UpdateStopInput(name=as_text(raw.get("name")) or "", updates=updates)


def parse_reorder_stops(raw: dict[str, Any]) -> ReorderStopsInput:
    names = as_list(raw.get("stop_names"))
    if names is None:
        return ReorderStopsInput(stop_names=None)
    return ReorderStopsInput(stop_names=[str(name) for name in names])


def parse_update_trip(raw: dict[str, Any]) -> UpdateTripInput:
    updates: dict[str, Any] = {}
    for key in TRIP_TEXT_FIELDS:
        text = as_text(raw.get(key))
        if text:
            updates[key] = text
    travelers = as_int(raw.get("travelers"))
    if travelers is not None:
        updates["travelers"] = travelers
    total_budget = as_number(raw.get("total_budget"))
    if total_budget is not None:
        updates["total_budget"] = total_budget
    ordered_keys = ("name", "start_date", "end_date", "travelers", "total_budget", "currency", "food_query")
    return UpdateTripInput(updates={key: updates[key] for key in ordered_keys if key in updates})


def parse_recommendations(raw: dict[str, Any], *, list_key: str) -> RecommendationsInput:
    groups: list[StopRecommendations] = []
    for entry in as_list(raw.get("recommendations")) or []:
        if not isinstance(entry, dict):
            continue
        items = [
            RecommendationItem(
                restaurant_name=as_text(item.get("restaurant_name")) or "",
                specialty=as_text(item.get("specialty")),
                address=as_text(item.get("address")),
                cost_per_person=as_number(item.get("cost_estimate")),
                time_suggestion=as_text(item.get("time_suggestion")),
                description=as_text(item.get("description")),
            )
            for item in as_list(entry.get(list_key)) or []
            if isinstance(item, dict)
        ]
        groups.append(StopRecommendations(stop_name=as_text(entry.get("stop_name")) or "", items=items))
    return RecommendationsInput(recommendations=groups)


def parse_tool_input(name: str, raw: Any) -> ToolInput | None:
    """도구 이름에 맞는 입력 변형을 반환합니다. 알 수 없는 도구는 None."""
    data = as_dict(raw)
    if name == tool_names.SET_ROUTE:
        return parse_set_route(data)
    if name == tool_names.ADD_STOP:
        return parse_add_stop(data)
    if name == tool_names.REMOVE_STOP:
        return parse_stop_reference(data)
    if name == tool_names.UPDATE_STOP:
        return parse_update_stop(data)
    if name == tool_names.REORDER_STOPS:
        return parse_reorder_stops(data)
    if name == tool_names.UPDATE_TRIP:
        return parse_update_trip(data)
    if name == tool_names.ADD_BURGER_RECOMMENDATIONS:
        return parse_recommendations(data, list_key="burgers")
    if name == tool_names.ADD_FONDUE_RECOMMENDATIONS:
        return parse_recommendations(data, list_key="fondues")
    return None
