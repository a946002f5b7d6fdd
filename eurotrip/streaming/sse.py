"""서버 전송 이벤트(SSE) 바이트 스트림 디코더."""

from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from typing import Any

from eurotrip.core.logger import get_logger

logger = get_logger(__name__)

_EVENT_PREFIX = "event: "
_DATA_PREFIX = "data: "
_DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True, slots=True)
class SSEEvent:
    """`data:` 줄 하나에 대응하는 디코딩된 이벤트."""

    event: str
    data: dict[str, Any]


class SSEDecoder:
    """임의 경계로 잘린 바이트 청크를 이벤트로 변환합니다.

    UTF-8 멀티바이트 문자와 줄이 청크 경계에서 잘려도 다음 청크와 이어
    붙여 처리하므로, 분할 방식과 관계없이 같은 이벤트 순서를 만듭니다.
    `event:` 줄은 이후 `data:` 줄의 이벤트 종류를 정하고, 해석할 수 없는
    JSON 줄은 건너뜁니다.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._current_event = ""

    def feed(self, chunk: bytes) -> list[SSEEvent]:
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def finish(self) -> list[SSEEvent]:
        """스트림 종료 시 남은 버퍼를 마지막 줄로 처리합니다."""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer, ""
        return self._parse_lines([remaining]) if remaining else []

    def _parse_lines(self, lines: list[str]) -> list[SSEEvent]:
        events: list[SSEEvent] = []
        for raw_line in lines:
            line = raw_line.rstrip("\r")
            if line.startswith(_EVENT_PREFIX):
                self._current_event = line[len(_EVENT_PREFIX) :].strip()
                continue
            if not line.startswith(_DATA_PREFIX):
                continue

            payload = line[len(_DATA_PREFIX) :]
            if not payload or payload == _DONE_SENTINEL:
                continue
            try:
                data = json.loads(payload)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed SSE data line (%d chars)", len(payload))
                continue
            if not isinstance(data, dict):
                continue

            event_type = self._current_event or str(data.get("type") or "")
            events.append(SSEEvent(event=event_type, data=data))
        return events


def format_sse_event(event: str, data: dict[str, Any]) -> bytes:
    """단일 SSE 이벤트를 바이트로 인코딩합니다."""
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n".encode("utf-8")
