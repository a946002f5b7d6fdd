"""도구 결과를 다음 라운드 입력으로 넘기는 노드."""

from __future__ import annotations

from eurotrip.graph.chat.state import ChatTurnState


def collect_tool_results(state: ChatTurnState) -> ChatTurnState:
    return {**state, "pending_tool_results": list(state.get("tool_results") or [])}
