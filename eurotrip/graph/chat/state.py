"""대화 턴 라운드 그래프 상태 정의."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Protocol, TypedDict

from eurotrip.core.scheduling import FrameScheduler
from eurotrip.schemas.chat import ChatMessage
from eurotrip.schemas.enums import ChatStatus
from eurotrip.store.store import TripStore


class ChatTurnState(TypedDict, total=False):
    """한 사용자 턴 동안의 라운드 진행 상태.

    Keys:
        round: 시작된 라운드 수
        max_rounds: 턴당 최대 라운드 수
        pending_tool_results: 다음 라운드에 보낼 `{"tool_use_id", "content"}` 목록
        payload: 이번 라운드 요청 본문
        stop_reason: 직전 스트림의 종료 사유
        tool_results: 직전 스트림에서 적용된 도구 호출 결과
        text: 직전 스트림의 최종 텍스트
        aborted: 중단 신호로 턴이 끝났는지 여부
    """

    round: int
    max_rounds: int
    pending_tool_results: list[dict[str, str]] | None
    payload: dict[str, Any]
    stop_reason: str | None
    tool_results: list[dict[str, str]]
    text: str
    aborted: bool


class CompletionStreamer(Protocol):
    def stream(self, payload: dict[str, Any]) -> AsyncIterator[bytes]: ...


@dataclass(slots=True)
class TurnContext:
    """노드가 `config["configurable"]["turn"]`으로 받는 턴 단위 협력 객체."""

    store: TripStore
    client: CompletionStreamer
    messages: list[ChatMessage]
    abort: asyncio.Event
    frame_scheduler: FrameScheduler
    build_payload: Callable[[list[dict[str, Any]]], dict[str, Any]]
    set_status: Callable[[ChatStatus], None]
    notify: Callable[[], None]
    strict_stop_names: bool = False
