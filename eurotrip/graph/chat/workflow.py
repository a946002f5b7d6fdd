"""대화 턴 라운드 그래프 워크플로우 구성."""

from langgraph.graph import END, StateGraph

from eurotrip.graph.chat.nodes import collect_tool_results, prepare_round, stream_round
from eurotrip.graph.chat.state import ChatTurnState
from eurotrip.schemas.enums import StopReason

# 라운드당 그래프 스텝 수 (prepare_round, stream_round, collect_tool_results)
STEPS_PER_ROUND = 3


def _route_after_prepare(state: ChatTurnState) -> str:
    if state.get("aborted"):
        return END
    return "stream_round"


def _route_after_stream(state: ChatTurnState) -> str:
    """도구 사용으로 끝났고 도구 호출이 있었으며 라운드 한도 이내일 때만 이어갑니다."""
    if state.get("aborted"):
        return END
    if state.get("stop_reason") != StopReason.TOOL_USE or not state.get("tool_results"):
        return END
    if state.get("round", 0) >= state.get("max_rounds", 1):
        return END
    return "collect_tool_results"


def _create_chat_workflow() -> StateGraph:
    workflow = StateGraph(ChatTurnState)

    workflow.add_node("prepare_round", prepare_round)
    workflow.add_node("stream_round", stream_round)
    workflow.add_node("collect_tool_results", collect_tool_results)

    workflow.set_entry_point("prepare_round")
    workflow.add_conditional_edges("prepare_round", _route_after_prepare, ["stream_round", END])
    workflow.add_conditional_edges("stream_round", _route_after_stream, ["collect_tool_results", END])
    workflow.add_edge("collect_tool_results", "prepare_round")

    return workflow


def recursion_limit_for(max_rounds: int) -> int:
    return max_rounds * STEPS_PER_ROUND + 2


compiled_chat_graph = _create_chat_workflow().compile()
