"""도구 호출 인터프리터.

도구 호출 하나를 현재 문서 기준으로 해석해 저장소 액션 목록과 모델에
돌려줄 결과 문자열을 만듭니다. 문서를 직접 변경하지 않으며, 도메인 오류는
예외 대신 결과 문자열로 보고합니다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from eurotrip.core.logger import get_logger
from eurotrip.schemas.chat import ParsedToolCall
from eurotrip.schemas.enums import ActivityCategory
from eurotrip.schemas.trip import Activity, Stop, TripDocument
from eurotrip.store.actions import (
    AddStop,
    RemoveStop,
    ReorderStops,
    SetRoute,
    TripAction,
    UpdateStop,
    UpdateTripMetadata,
)
from eurotrip.store.reducer import IdFactory, default_id_factory
from eurotrip.tools import definitions as tool_names
from eurotrip.tools.coercion import (
    AddStopInput,
    RecommendationItem,
    RecommendationsInput,
    ReorderStopsInput,
    SetRouteInput,
    StopReferenceInput,
    ToolInput,
    UpdateStopInput,
    UpdateTripInput,
    parse_tool_input,
)
from eurotrip.tools.modes import PlacedRecommendations, get_mode_hook

logger = get_logger(__name__)

ROUTE_ARROW = " → "


@dataclass(frozen=True, slots=True)
class InterpretResult:
    actions: list[TripAction] = field(default_factory=list)
    result_text: str = ""


@dataclass(frozen=True, slots=True)
class InterpretContext:
    document: TripDocument
    id_factory: IdFactory
    strict_stop_names: bool


@dataclass(frozen=True, slots=True)
class _RecommendationKind:
    category: ActivityCategory
    noun: str
    duration_hours: float
    suffix: str


_BURGER = _RecommendationKind(ActivityCategory.BURGER, "burger", 1, " 🍔")
_FONDUE = _RecommendationKind(ActivityCategory.FONDUE, "fondue", 2, " 🧀")


def _not_found(name: str, document: TripDocument) -> InterpretResult:
    current = ", ".join(document.stop_names())
    return InterpretResult(result_text=f'Error: Stop "{name}" not found. Current stops: {current}')


def _with_id(stop: Stop, id_factory: IdFactory) -> Stop:
    return stop.model_copy(update={"id": id_factory()})


def _set_route(data: SetRouteInput, ctx: InterpretContext) -> InterpretResult:
    if not data.stops:
        return InterpretResult(result_text="Error: stops array is required and must not be empty.")

    stops = [_with_id(stop, ctx.id_factory) for stop in data.stops]
    actions: list[TripAction] = [SetRoute(stops=stops)]

    metadata: dict[str, object] = {}
    if data.trip_name:
        metadata["name"] = data.trip_name
    if data.start_date:
        metadata["start_date"] = data.start_date
    if data.travelers is not None:
        metadata["travelers"] = data.travelers
    if data.total_budget is not None:
        metadata["total_budget"] = data.total_budget
    if metadata:
        actions.append(UpdateTripMetadata(updates=metadata))

    names = ROUTE_ARROW.join(stop.name for stop in stops)
    return InterpretResult(actions=actions, result_text=f"Route set with {len(stops)} stops: {names}")


def _add_stop(data: AddStopInput, ctx: InterpretContext) -> InterpretResult:
    stop = _with_id(data.stop, ctx.id_factory)
    where = f" at position {data.position}" if data.position is not None else " at the end"
    return InterpretResult(
        actions=[AddStop(stop=stop, position=data.position)],
        result_text=f"Added stop: {stop.name}{where}",
    )


def _remove_stop(data: StopReferenceInput, ctx: InterpretContext) -> InterpretResult:
    found = ctx.document.find_stop_by_name(data.name)
    if found is None:
        return _not_found(data.name, ctx.document)
    return InterpretResult(actions=[RemoveStop(stop_id=found.id)], result_text=f"Removed stop: {found.name}")


def _update_stop(data: UpdateStopInput, ctx: InterpretContext) -> InterpretResult:
    found = ctx.document.find_stop_by_name(data.name)
    if found is None:
        return _not_found(data.name, ctx.document)
    return InterpretResult(
        actions=[UpdateStop(stop_id=found.id, updates=dict(data.updates))],
        result_text=f"Updated stop: {found.name}",
    )


def _reorder_stops(data: ReorderStopsInput, ctx: InterpretContext) -> InterpretResult:
    if data.stop_names is None:
        return InterpretResult(result_text="Error: stop_names array is required.")

    ordered_ids: list[str] = []
    for name in data.stop_names:
        found = ctx.document.find_stop_by_name(name)
        if found is None:
            return _not_found(name, ctx.document)
        ordered_ids.append(found.id)

    return InterpretResult(
        actions=[ReorderStops(stop_ids=ordered_ids)],
        result_text=f"Reordered stops: {ROUTE_ARROW.join(data.stop_names)}",
    )


def _update_trip(data: UpdateTripInput, ctx: InterpretContext) -> InterpretResult:
    return InterpretResult(
        actions=[UpdateTripMetadata(updates=dict(data.updates))],
        result_text=f"Updated trip: {', '.join(data.updates)}",
    )


def _build_activity(item: RecommendationItem, kind: _RecommendationKind, travelers: int) -> Activity:
    cost = item.cost_per_person * travelers if item.cost_per_person is not None else None
    return Activity(
        name=item.restaurant_name,
        category=kind.category,
        specialty=item.specialty,
        address=item.address,
        cost_estimate=cost,
        time=item.time_suggestion,
        description=item.description,
        duration_hours=kind.duration_hours,
    )


def _recommend(data: RecommendationsInput, ctx: InterpretContext, kind: _RecommendationKind) -> InterpretResult:
    if not data.recommendations:
        return InterpretResult(result_text="Error: recommendations array is required and must not be empty.")

    document = ctx.document
    if ctx.strict_stop_names:
        for group in data.recommendations:
            if document.find_stop_by_name(group.stop_name) is None:
                return _not_found(group.stop_name, document)

    travelers = document.metadata.travelers or 1
    # 같은 정류지가 여러 번 나오면 앞선 추가분 위에 이어 붙입니다.
    working: dict[str, list[Activity]] = {}
    actions: list[TripAction] = []
    lines: list[str] = []
    placed: list[PlacedRecommendations] = []

    for group in data.recommendations:
        found = document.find_stop_by_name(group.stop_name)
        if found is None:
            lines.append(f'⚠️ Stop "{group.stop_name}" not found, skipped')
            continue

        added = [_build_activity(item, kind, travelers) for item in group.items]
        activities = working.get(found.id, list(found.activities)) + added
        working[found.id] = activities
        actions.append(UpdateStop(stop_id=found.id, updates={"activities": activities}))
        placed.append(PlacedRecommendations(stop_name=group.stop_name, items=group.items))

        names = ", ".join(item.restaurant_name for item in group.items)
        lines.append(f"Added {len(added)} {kind.noun} spots to {found.name}: {names}")

    hook = get_mode_hook(document.metadata.mode)
    if hook is not None:
        actions.extend(hook.after_recommendations(kind.category, placed, document))

    return InterpretResult(actions=actions, result_text="\n".join(lines) + kind.suffix)


def _add_burger_recommendations(data: RecommendationsInput, ctx: InterpretContext) -> InterpretResult:
    return _recommend(data, ctx, _BURGER)


def _add_fondue_recommendations(data: RecommendationsInput, ctx: InterpretContext) -> InterpretResult:
    return _recommend(data, ctx, _FONDUE)


Handler = Callable[[ToolInput, InterpretContext], InterpretResult]

HANDLERS: dict[str, Handler] = {
    tool_names.SET_ROUTE: _set_route,
    tool_names.ADD_STOP: _add_stop,
    tool_names.REMOVE_STOP: _remove_stop,
    tool_names.UPDATE_STOP: _update_stop,
    tool_names.REORDER_STOPS: _reorder_stops,
    tool_names.UPDATE_TRIP: _update_trip,
    tool_names.ADD_BURGER_RECOMMENDATIONS: _add_burger_recommendations,
    tool_names.ADD_FONDUE_RECOMMENDATIONS: _add_fondue_recommendations,
}


def interpret(
    tool_call: ParsedToolCall,
    document: TripDocument,
    *,
    id_factory: IdFactory = default_id_factory,
    strict_stop_names: bool = False,
) -> InterpretResult:
    """도구 호출을 액션과 결과 문자열로 변환합니다. 예외를 던지지 않습니다.

    Args:
        tool_call: 스트림에서 완성된 도구 호출.
        document: 이 호출이 적용될 시점의 문서.
        id_factory: 새 정류지 id 생성기.
        strict_stop_names: True면 추천 도구도 알 수 없는 정류지가 하나라도
            있을 때 전체를 거부합니다.
    """
    handler = HANDLERS.get(tool_call.name)
    data = parse_tool_input(tool_call.name, tool_call.input)
    if handler is None or data is None:
        logger.warning("Unknown tool requested: %s", tool_call.name)
        return InterpretResult(result_text=f"Unknown tool: {tool_call.name}")

    ctx = InterpretContext(document=document, id_factory=id_factory, strict_stop_names=strict_stop_names)
    result = handler(data, ctx)
    logger.info("Tool %s -> %d action(s)", tool_call.name, len(result.actions))
    return result
