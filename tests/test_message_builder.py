"""outbound 메시지 구성 테스트."""

from eurotrip.schemas.chat import ChatMessage, ToolCallInfo
from eurotrip.schemas.enums import ChatRole
from eurotrip.services.message_builder import build_api_messages


def _assistant(content: str, *calls: ToolCallInfo) -> ChatMessage:
    return ChatMessage(role=ChatRole.ASSISTANT, content=content, tool_calls=list(calls) or None)


def test_tool_calls_are_paired_with_results():
    history = [
        ChatMessage(role=ChatRole.USER, content="Plan Paris to Rome"),
        _assistant("On it.", ToolCallInfo(id="t1", name="set_route", input={"stops": []}, result="Route set")),
        _assistant("Done!"),
    ]

    messages = build_api_messages(history)

    assert messages == [
        {"role": "user", "content": "Plan Paris to Rome"},
        {
            "role": "assistant",
            "content": [
                {"type": "text", "text": "On it."},
                {"type": "tool_use", "id": "t1", "name": "set_route", "input": {"stops": []}},
            ],
        },
        {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t1", "content": "Route set"}]},
        {"role": "assistant", "content": [{"type": "text", "text": "Done!"}]},
    ]


def test_pending_results_are_appended_once_at_the_end():
    history = [
        ChatMessage(role=ChatRole.USER, content="Add Lyon"),
        _assistant("", ToolCallInfo(id="t2", name="add_stop", input={"name": "Lyon"})),
    ]

    messages = build_api_messages(history, [{"tool_use_id": "t2", "content": "Added stop: Lyon"}])

    assert messages[1] == {
        "role": "assistant",
        "content": [{"type": "tool_use", "id": "t2", "name": "add_stop", "input": {"name": "Lyon"}}],
    }
    assert messages[2:] == [
        {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t2", "content": "Added stop: Lyon"}]}
    ]


def test_missing_result_defaults_to_done_and_empty_assistant_is_dropped():
    history = [
        ChatMessage(role=ChatRole.USER, content="Hi"),
        _assistant("", ToolCallInfo(id="t3", name="update_trip")),
        _assistant(""),
    ]

    messages = build_api_messages(history)

    assert messages[-1] == {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "t3", "content": "Done"}]}
    assert len(messages) == 3
