"""라운드 스트리밍 노드."""

from __future__ import annotations

from contextlib import aclosing

from langchain_core.runnables import RunnableConfig

from eurotrip.core.logger import get_logger
from eurotrip.graph.chat.state import ChatTurnState, TurnContext
from eurotrip.schemas.chat import ToolCallInfo
from eurotrip.streaming.session import StreamSession

logger = get_logger(__name__)


async def stream_round(state: ChatTurnState, config: RunnableConfig) -> ChatTurnState:
    """요청을 보내고 응답 스트림을 끝까지 소비합니다.

    도구 호출은 스트림 도중 저장소에 바로 적용되고, 텍스트는 마지막
    어시스턴트 메시지에 프레임 단위로 반영됩니다.
    """
    ctx: TurnContext = config["configurable"]["turn"]
    assistant = ctx.messages[-1]

    def _on_text(text: str) -> None:
        assistant.content = text
        ctx.notify()

    def _on_tool_call(info: ToolCallInfo) -> None:
        assistant.tool_calls = [*(assistant.tool_calls or []), info]
        ctx.notify()

    session = StreamSession(
        ctx.store,
        frame_scheduler=ctx.frame_scheduler,
        on_text=_on_text,
        on_tool_call=_on_tool_call,
        strict_stop_names=ctx.strict_stop_names,
    )
    async with aclosing(ctx.client.stream(state["payload"])) as chunks:
        result = await session.consume(chunks, ctx.abort)

    if result.aborted:
        return {**state, "aborted": True}

    assistant.content = result.text
    assistant.tool_calls = result.tool_calls or None
    ctx.notify()

    logger.info(
        "Round %d finished: stop_reason=%s tool_calls=%d",
        state.get("round", 0),
        result.stop_reason,
        len(result.tool_calls),
    )
    return {
        **state,
        "stop_reason": result.stop_reason,
        "tool_results": [
            {"tool_use_id": call.id, "content": call.result or "Done"} for call in result.tool_calls
        ],
        "text": result.text,
    }
