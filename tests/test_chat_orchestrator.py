"""대화 턴 오케스트레이터 테스트."""

import asyncio
import itertools

import pytest

from eurotrip.schemas.enums import ChatRole, ChatStatus
from eurotrip.services.chat_service import ChatOrchestrator
from eurotrip.services.completion_client import CompletionRequestError
from eurotrip.store.store import TripStore
from tests.mocks.mock_completion_client import (
    ScriptedCompletionClient,
    stop_event,
    text_events,
    to_chunks,
    tool_events,
)

ROUTE = {
    "trip_name": "Benelux",
    "stops": [
        {"name": "Amsterdam", "lat": 52.37, "lng": 4.9, "nights": 2},
        {"name": "Brussels", "lat": 50.85, "lng": 4.35, "nights": 1},
    ],
}


def _store() -> TripStore:
    counter = itertools.count(1)
    return TripStore(id_factory=lambda: f"stop-{next(counter)}")


def _orchestrator(client, **kwargs) -> ChatOrchestrator:
    kwargs.setdefault("frame_interval_seconds", 0)
    return ChatOrchestrator(_store(), client, **kwargs)


def _tool_round(tool_id: str, text: str) -> list[bytes]:
    return to_chunks([*text_events(text), *tool_events(tool_id, "set_route", ROUTE), *stop_event("tool_use")], 9)


@pytest.mark.asyncio
async def test_tool_use_triggers_continuation_with_tool_result():
    client = ScriptedCompletionClient(
        [
            _tool_round("toolu_route", "Setting up your route."),
            to_chunks([*text_events("Your Benelux trip is ready!"), *stop_event("end_turn")]),
        ]
    )
    orchestrator = _orchestrator(client, currency="EUR")

    assert await orchestrator.send_message("  Amsterdam to Brussels please ") is True

    assert len(client.payloads) == 2
    first, second = client.payloads
    assert first["messages"] == [{"role": "user", "content": "Amsterdam to Brussels please"}]
    assert first["tripState"]["stops"] == []
    assert first["currency"] == "EUR"

    last_message = second["messages"][-1]
    assert last_message["role"] == "user"
    assert last_message["content"][0]["type"] == "tool_result"
    assert last_message["content"][0]["tool_use_id"] == "toolu_route"
    assert last_message["content"][0]["content"].startswith("Route set with 2 stops")
    assert [stop["name"] for stop in second["tripState"]["stops"]] == ["Amsterdam", "Brussels"]

    assert orchestrator.status == ChatStatus.IDLE
    assert orchestrator.error is None
    assert [message.role for message in orchestrator.messages] == [ChatRole.USER, ChatRole.ASSISTANT, ChatRole.ASSISTANT]
    assert orchestrator.messages[1].tool_calls[0].id == "toolu_route"
    assert orchestrator.messages[2].content == "Your Benelux trip is ready!"
    assert orchestrator.messages[2].tool_calls is None


@pytest.mark.asyncio
async def test_turn_ends_quietly_at_max_rounds():
    client = ScriptedCompletionClient([_tool_round(f"toolu_{index}", f"Round {index}") for index in range(1, 6)])
    orchestrator = _orchestrator(client, max_rounds=3)

    await orchestrator.send_message("Keep going")

    assert len(client.payloads) == 3
    assert orchestrator.status == ChatStatus.IDLE
    assert orchestrator.error is None
    assert orchestrator.messages[-1].content == "Round 3"
    assert orchestrator.is_busy is False


@pytest.mark.asyncio
async def test_end_turn_without_tools_is_a_single_round():
    client = ScriptedCompletionClient([to_chunks([*text_events("Where are you starting from?"), *stop_event("end_turn")], 3)])
    orchestrator = _orchestrator(client)
    statuses = []
    orchestrator.subscribe(lambda: statuses.append(orchestrator.status))

    await orchestrator.send_message("Plan a trip")

    assert len(client.payloads) == 1
    assert orchestrator.messages[-1].content == "Where are you starting from?"
    assert ChatStatus.STREAMING in statuses
    assert statuses[-1] == ChatStatus.IDLE


@pytest.mark.asyncio
async def test_second_message_is_rejected_while_busy():
    gate = asyncio.Event()
    client = ScriptedCompletionClient(
        [to_chunks([*text_events("Thinking..."), *stop_event("end_turn")], 16)],
        gate=gate,
    )
    orchestrator = _orchestrator(client)

    turn = asyncio.create_task(orchestrator.send_message("first"))
    await client.started.wait()

    assert orchestrator.is_busy is True
    assert await orchestrator.send_message("second") is False
    assert await orchestrator.send_message("   ") is False

    gate.set()
    assert await turn is True
    assert [message.content for message in orchestrator.messages if message.role == ChatRole.USER] == ["first"]
    assert orchestrator.is_busy is False


@pytest.mark.asyncio
async def test_stop_cancels_turn_and_returns_to_idle():
    gate = asyncio.Event()
    client = ScriptedCompletionClient(
        [to_chunks([*text_events("This will be interrupted"), *stop_event("end_turn")], 16)],
        gate=gate,
    )
    orchestrator = _orchestrator(client)

    turn = asyncio.create_task(orchestrator.send_message("go"))
    await client.started.wait()
    orchestrator.stop()

    assert orchestrator.status == ChatStatus.IDLE
    assert await turn is True
    assert orchestrator.status == ChatStatus.IDLE
    assert orchestrator.error is None
    assert orchestrator.is_busy is False
    assert len(client.payloads) == 1


@pytest.mark.asyncio
async def test_request_error_sets_error_state():
    client = ScriptedCompletionClient([], error=CompletionRequestError("Rate limit exceeded. Please try again in a minute.", 429))
    orchestrator = _orchestrator(client)

    await orchestrator.send_message("hello")

    assert orchestrator.status == ChatStatus.ERROR
    assert orchestrator.error == "Rate limit exceeded. Please try again in a minute."
    assert orchestrator.is_busy is False


@pytest.mark.asyncio
async def test_stream_error_event_sets_error_state():
    client = ScriptedCompletionClient(
        [to_chunks(['event: error\ndata: {"type": "api_error", "status": 529, "message": "Overloaded"}\n\n'])]
    )
    orchestrator = _orchestrator(client)

    await orchestrator.send_message("hello")

    assert orchestrator.status == ChatStatus.ERROR
    assert orchestrator.error == "Overloaded"


@pytest.mark.asyncio
async def test_reset_clears_history():
    client = ScriptedCompletionClient([to_chunks([*text_events("Hi!"), *stop_event("end_turn")])])
    orchestrator = _orchestrator(client)
    await orchestrator.send_message("hello")

    orchestrator.reset()

    assert orchestrator.messages == []
    assert orchestrator.status == ChatStatus.IDLE


class _SlowCleanupClient:
    """첫 턴은 취소된 뒤 정리 단계에서 멈추고, 둘째 턴은 텍스트를 보낸 뒤 대기한다."""

    def __init__(self) -> None:
        self.first_started = asyncio.Event()
        self.second_started = asyncio.Event()
        self.release_cleanup = asyncio.Event()
        self.second_gate = asyncio.Event()
        self.calls = 0

    async def stream(self, payload):
        self.calls += 1
        if self.calls == 1:
            yield to_chunks(text_events("First turn"))[0]
            self.first_started.set()
            try:
                await asyncio.Event().wait()
            finally:
                await self.release_cleanup.wait()
            return

        yield to_chunks(text_events("Second turn streaming"))[0]
        self.second_started.set()
        await self.second_gate.wait()
        yield to_chunks(stop_event("end_turn"))[0]


@pytest.mark.asyncio
async def test_stopped_turn_cleanup_keeps_next_turn_text_updates():
    client = _SlowCleanupClient()
    orchestrator = _orchestrator(client, frame_interval_seconds=0.02)

    first = asyncio.create_task(orchestrator.send_message("first"))
    await asyncio.wait_for(client.first_started.wait(), 1)
    orchestrator.stop()

    second = asyncio.create_task(orchestrator.send_message("second"))
    await asyncio.wait_for(client.second_started.wait(), 1)
    client.release_cleanup.set()
    await asyncio.wait_for(first, 1)
    await asyncio.sleep(0.1)

    assert orchestrator.is_busy is True
    assert orchestrator.messages[-1].role == ChatRole.ASSISTANT
    assert orchestrator.messages[-1].content == "Second turn streaming"

    client.second_gate.set()
    assert await asyncio.wait_for(second, 1) is True
    assert orchestrator.status == ChatStatus.IDLE
    assert orchestrator.messages[-1].content == "Second turn streaming"
