"""라운드 시작 노드: 자리표시 메시지를 추가하고 요청 본문을 만듭니다."""

from __future__ import annotations

from langchain_core.runnables import RunnableConfig

from eurotrip.graph.chat.state import ChatTurnState, TurnContext
from eurotrip.schemas.chat import ChatMessage
from eurotrip.schemas.enums import ChatRole, ChatStatus
from eurotrip.services.message_builder import build_api_messages


async def prepare_round(state: ChatTurnState, config: RunnableConfig) -> ChatTurnState:
    ctx: TurnContext = config["configurable"]["turn"]
    if ctx.abort.is_set():
        return {**state, "aborted": True}

    pending = state.get("pending_tool_results")
    ctx.set_status(ChatStatus.PROCESSING_TOOLS if pending else ChatStatus.STREAMING)

    # 요청에는 방금 추가한 자리표시 메시지를 포함하지 않습니다.
    history = list(ctx.messages)
    ctx.messages.append(ChatMessage(role=ChatRole.ASSISTANT, content=""))
    ctx.notify()

    return {
        **state,
        "round": state.get("round", 0) + 1,
        "payload": ctx.build_payload(build_api_messages(history, pending)),
        "stop_reason": None,
        "tool_results": [],
        "text": "",
    }
