"""대화 및 채팅 프록시 요청 스키마."""

from __future__ import annotations

import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from eurotrip.schemas.enums import ChatRole


def _now_millis() -> int:
    return int(time.time() * 1000)


class ToolCallInfo(BaseModel):
    """어시스턴트 메시지에 기록되는 도구 호출."""

    id: str = Field(..., description="tool_use 블록 id")
    name: str = Field(..., description="도구 이름")
    input: dict[str, Any] = Field(default_factory=dict, description="파싱된 도구 입력")
    result: str | None = Field(default=None, description="해석 결과 문자열")


class ParsedToolCall(BaseModel):
    """스트림에서 완성된 도구 호출."""

    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ChatMessage(BaseModel):
    """대화 기록의 단일 메시지.

    스트리밍 중에는 `content`와 `tool_calls`가 제자리에서 갱신됩니다.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: ChatRole
    content: str = ""
    tool_calls: list[ToolCallInfo] | None = None
    timestamp: int = Field(default_factory=_now_millis)


class ChatProxyRequest(BaseModel):
    """`POST /api/chat` 요청 본문.

    시스템 프롬프트와 도구 스키마는 서버가 `trip_state`와 표시 옵션으로 만듭니다.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[dict[str, Any]] = Field(default_factory=list, description="제공자 형식 메시지 목록")
    trip_state: dict[str, Any] | None = Field(default=None, alias="tripState", description="현재 여행 문서")
    user_location: str | None = Field(default=None, alias="userLocation", description="사용자 현재 위치")
    language: str | None = Field(default=None, description="응답 언어")
    currency: str | None = Field(default=None, description="통화 코드")


class AuthRequest(BaseModel):
    """`POST /api/auth` 요청 본문."""

    password: str | None = None
