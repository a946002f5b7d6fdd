"""단일 스트리밍 응답 처리 세션."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable

from eurotrip.core.logger import get_logger
from eurotrip.core.scheduling import FrameScheduler
from eurotrip.schemas.chat import ParsedToolCall, ToolCallInfo
from eurotrip.store.store import TripStore
from eurotrip.streaming.sse import SSEDecoder, SSEEvent
from eurotrip.tools.interpreter import interpret

logger = get_logger(__name__)

TextListener = Callable[[str], None]
ToolCallListener = Callable[[ToolCallInfo], None]


class StreamError(RuntimeError):
    """스트림 안에서 `error` 이벤트를 받았을 때 발생하는 예외."""


@dataclass(slots=True)
class _ToolAccumulator:
    id: str
    name: str
    input_json: str = ""


@dataclass(slots=True)
class StreamResult:
    """한 라운드 스트림 처리 결과."""

    stop_reason: str | None = None
    parsed_tool_calls: list[ParsedToolCall] = field(default_factory=list)
    tool_calls: list[ToolCallInfo] = field(default_factory=list)
    text: str = ""
    aborted: bool = False


def _error_message(data: dict[str, Any]) -> str:
    message = data.get("message")
    if message:
        return str(message)
    nested = data.get("error")
    if isinstance(nested, dict) and nested.get("message"):
        return str(nested["message"])
    return "Stream error"


def parse_tool_input(raw_json: str) -> dict[str, Any]:
    """누적된 도구 입력 JSON을 파싱합니다. 실패하면 빈 입력을 반환합니다."""
    try:
        parsed = json.loads(raw_json or "{}")
    except json.JSONDecodeError:
        logger.warning("Failed to parse tool call JSON (%d chars); using empty input", len(raw_json))
        return {}
    return parsed if isinstance(parsed, dict) else {}


class StreamSession:
    """SSE 바이트 스트림을 소비하며 텍스트를 모으고 도구 호출을 즉시 적용합니다.

    도구 호출은 블록이 끝나는 순서대로 해석되며, 각 호출은 같은 응답 안의
    앞선 호출이 반영된 문서를 기준으로 합니다. 텍스트 갱신 알림은
    `FrameScheduler`로 합쳐져 tick당 최대 한 번만 전달됩니다.
    """

    def __init__(
        self,
        store: TripStore,
        *,
        frame_scheduler: FrameScheduler | None = None,
        on_text: TextListener | None = None,
        on_tool_call: ToolCallListener | None = None,
        strict_stop_names: bool = False,
    ) -> None:
        self._store = store
        self._frame_scheduler = frame_scheduler or FrameScheduler()
        self._on_text = on_text
        self._on_tool_call = on_tool_call
        self._strict_stop_names = strict_stop_names
        self._decoder = SSEDecoder()
        self._accumulators: dict[int, _ToolAccumulator] = {}
        self._result = StreamResult()

    @property
    def result(self) -> StreamResult:
        return self._result

    async def consume(self, chunks: AsyncIterator[bytes], abort: asyncio.Event | None = None) -> StreamResult:
        """스트림이 끝나거나 중단될 때까지 청크를 처리합니다.

        Raises:
            StreamError: 스트림에 `error` 이벤트가 포함된 경우.
        """
        try:
            async for chunk in chunks:
                if abort is not None and abort.is_set():
                    self._result.aborted = True
                    break
                for event in self._decoder.feed(chunk):
                    self._handle(event)
            else:
                for event in self._decoder.finish():
                    self._handle(event)
        finally:
            self._frame_scheduler.cancel()

        if not self._result.aborted:
            self._commit_text()
        return self._result

    def _commit_text(self) -> None:
        if self._on_text is not None:
            self._on_text(self._result.text)

    def _handle(self, event: SSEEvent) -> None:
        data = event.data
        if event.event == "content_block_start":
            block = data.get("content_block")
            if isinstance(block, dict) and block.get("type") == "tool_use":
                self._accumulators[data.get("index", 0)] = _ToolAccumulator(
                    id=str(block.get("id", "")),
                    name=str(block.get("name", "")),
                )
        elif event.event == "content_block_delta":
            self._handle_delta(data)
        elif event.event == "content_block_stop":
            accumulator = self._accumulators.pop(data.get("index", 0), None)
            if accumulator is not None:
                self._finish_tool_call(accumulator)
        elif event.event == "message_delta":
            delta = data.get("delta")
            if isinstance(delta, dict) and delta.get("stop_reason"):
                self._result.stop_reason = str(delta["stop_reason"])
        elif event.event == "error":
            raise StreamError(_error_message(data))

    def _handle_delta(self, data: dict[str, Any]) -> None:
        delta = data.get("delta")
        if not isinstance(delta, dict):
            return
        if delta.get("type") == "text_delta":
            self._result.text += str(delta.get("text", ""))
            if self._on_text is not None:
                self._frame_scheduler.request(self._commit_text)
        elif delta.get("type") == "input_json_delta":
            accumulator = self._accumulators.get(data.get("index", 0))
            if accumulator is not None:
                accumulator.input_json += str(delta.get("partial_json", ""))

    def _finish_tool_call(self, accumulator: _ToolAccumulator) -> None:
        parsed = ParsedToolCall(
            id=accumulator.id,
            name=accumulator.name,
            input=parse_tool_input(accumulator.input_json),
        )
        outcome = interpret(
            parsed,
            self._store.document,
            id_factory=self._store.id_factory,
            strict_stop_names=self._strict_stop_names,
        )
        for action in outcome.actions:
            self._store.dispatch(action)

        info = ToolCallInfo(id=parsed.id, name=parsed.name, input=parsed.input, result=outcome.result_text)
        self._result.parsed_tool_calls.append(parsed)
        self._result.tool_calls.append(info)
        if self._on_tool_call is not None:
            self._on_tool_call(info)
