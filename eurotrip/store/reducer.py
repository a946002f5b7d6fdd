"""여행 문서 순수 리듀서."""

from __future__ import annotations

import uuid
from typing import Any, Callable

from eurotrip.schemas.trip import Stop, TripDocument, TripMetadata
from eurotrip.store.actions import (
    AddStop,
    LoadState,
    RemoveStop,
    ReorderStops,
    Reset,
    SetRoute,
    SetRouteSegments,
    SetSelectedStop,
    TripAction,
    UpdateStop,
    UpdateTripMetadata,
)

IdFactory = Callable[[], str]


def default_id_factory() -> str:
    return str(uuid.uuid4())


def create_default_document() -> TripDocument:
    """빈 여행 문서를 생성합니다."""
    return TripDocument(metadata=TripMetadata(name=""))


def _ensure_id(stop: Stop, id_factory: IdFactory) -> Stop:
    if stop.id:
        return stop
    return stop.model_copy(update={"id": id_factory()})


def _merge(model: Any, updates: dict[str, Any]) -> Any:
    """모델에 얕은 병합 패치를 적용하고 다시 검증합니다."""
    if not updates:
        return model
    merged = {**model.model_dump(), **updates}
    return type(model).model_validate(merged)


def _insert_position(position: int | None, length: int) -> int:
    if position is None:
        return length
    return max(0, min(int(position), length))


def _reorder(stops: list[Stop], stop_ids: list[str]) -> list[Stop]:
    by_id = {stop.id: stop for stop in stops}
    ordered: list[Stop] = []
    seen: set[str] = set()
    for stop_id in stop_ids:
        stop = by_id.get(stop_id)
        if stop is None or stop_id in seen:
            continue
        ordered.append(stop)
        seen.add(stop_id)
    ordered.extend(stop for stop in stops if stop.id not in seen)
    return ordered


def apply(document: TripDocument, action: TripAction, *, id_factory: IdFactory = default_id_factory) -> TripDocument:
    """액션을 적용한 새 문서를 반환합니다.

    정류지 구성이나 순서를 바꾸는 액션은 같은 전이에서 `route_segments`를
    비웁니다. 입력 문서는 변경하지 않습니다.
    """
    if isinstance(action, SetRoute):
        stops = [_ensure_id(stop, id_factory) for stop in action.stops]
        return document.model_copy(update={"stops": stops, "route_segments": []})

    if isinstance(action, AddStop):
        stop = _ensure_id(action.stop, id_factory)
        stops = list(document.stops)
        stops.insert(_insert_position(action.position, len(stops)), stop)
        return document.model_copy(update={"stops": stops, "route_segments": []})

    if isinstance(action, RemoveStop):
        if document.find_stop(action.stop_id) is None:
            return document
        stops = [stop for stop in document.stops if stop.id != action.stop_id]
        return document.model_copy(update={"stops": stops, "route_segments": []})

    if isinstance(action, UpdateStop):
        if document.find_stop(action.stop_id) is None:
            return document
        updates = {key: value for key, value in action.updates.items() if key != "id"}
        stops = [_merge(stop, updates) if stop.id == action.stop_id else stop for stop in document.stops]
        return document.model_copy(update={"stops": stops})

    if isinstance(action, ReorderStops):
        stops = _reorder(document.stops, action.stop_ids)
        return document.model_copy(update={"stops": stops, "route_segments": []})

    if isinstance(action, UpdateTripMetadata):
        return document.model_copy(update={"metadata": _merge(document.metadata, action.updates)})

    if isinstance(action, SetRouteSegments):
        return document.model_copy(update={"route_segments": list(action.segments)})

    if isinstance(action, SetSelectedStop):
        return document.model_copy(update={"selected_stop_id": action.stop_id})

    if isinstance(action, LoadState):
        return action.document

    if isinstance(action, Reset):
        return create_default_document()

    raise TypeError(f"Unsupported trip action: {type(action).__name__}")
