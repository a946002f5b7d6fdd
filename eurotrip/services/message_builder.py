"""대화 기록을 제공자 content-block 형식 메시지로 변환합니다."""

from __future__ import annotations

from typing import Any

from eurotrip.schemas.chat import ChatMessage
from eurotrip.schemas.enums import ChatRole

ToolResult = dict[str, str]

_DEFAULT_TOOL_RESULT = "Done"


def tool_result_block(tool_use_id: str, content: str) -> dict[str, Any]:
    return {"type": "tool_result", "tool_use_id": tool_use_id, "content": content}


def build_api_messages(
    chat_messages: list[ChatMessage],
    pending_tool_results: list[ToolResult] | None = None,
) -> list[dict[str, Any]]:
    """outbound 메시지 목록을 만듭니다.

    도구를 호출한 어시스턴트 메시지 뒤에는 항상 `tool_result` 블록을 담은
    user 메시지가 이어집니다. 단, `pending_tool_results`가 다루는 id는
    건너뛰고 마지막에 한 번만 붙입니다.

    Args:
        chat_messages: 지금까지의 대화 기록 (진행 중인 자리표시 메시지 제외).
        pending_tool_results: 직전 라운드의 `{"tool_use_id", "content"}` 목록.
    """
    pending = pending_tool_results or []
    pending_ids = {item["tool_use_id"] for item in pending}
    api_messages: list[dict[str, Any]] = []

    for message in chat_messages:
        if message.role == ChatRole.USER:
            api_messages.append({"role": "user", "content": message.content})
            continue

        blocks: list[dict[str, Any]] = []
        if message.content:
            blocks.append({"type": "text", "text": message.content})
        for call in message.tool_calls or []:
            blocks.append({"type": "tool_use", "id": call.id, "name": call.name, "input": call.input})
        if blocks:
            api_messages.append({"role": "assistant", "content": blocks})

        historical = [call for call in message.tool_calls or [] if call.id not in pending_ids]
        if historical:
            api_messages.append(
                {
                    "role": "user",
                    "content": [tool_result_block(call.id, call.result or _DEFAULT_TOOL_RESULT) for call in historical],
                }
            )

    if pending:
        api_messages.append(
            {
                "role": "user",
                "content": [tool_result_block(item["tool_use_id"], item["content"]) for item in pending],
            }
        )
    return api_messages
