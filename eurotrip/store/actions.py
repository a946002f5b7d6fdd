"""여행 문서 변경 액션 정의.

문서는 아래 닫힌 액션 집합을 통해서만 변경됩니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from eurotrip.schemas.trip import RouteSegment, Stop, TripDocument


@dataclass(frozen=True, slots=True)
class SetRoute:
    stops: list[Stop]


@dataclass(frozen=True, slots=True)
class AddStop:
    stop: Stop
    position: int | None = None


@dataclass(frozen=True, slots=True)
class RemoveStop:
    stop_id: str


@dataclass(frozen=True, slots=True)
class UpdateStop:
    stop_id: str
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ReorderStops:
    stop_ids: list[str]


@dataclass(frozen=True, slots=True)
class UpdateTripMetadata:
    updates: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SetRouteSegments:
    segments: list[RouteSegment]


@dataclass(frozen=True, slots=True)
class SetSelectedStop:
    stop_id: str | None


@dataclass(frozen=True, slots=True)
class LoadState:
    document: TripDocument


@dataclass(frozen=True, slots=True)
class Reset:
    pass


TripAction = Union[
    SetRoute,
    AddStop,
    RemoveStop,
    UpdateStop,
    ReorderStops,
    UpdateTripMetadata,
    SetRouteSegments,
    SetSelectedStop,
    LoadState,
    Reset,
]
