"""채팅 프록시 엔드포인트 스트리밍 클라이언트."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator

import httpx

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.timeout_policy import get_timeout_policy, to_httpx_timeout

logger = get_logger(__name__)


class CompletionRequestError(RuntimeError):
    """완성 요청이 2xx가 아닌 응답으로 끝났을 때 발생하는 예외."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_message(body: bytes, status_code: int) -> str:
    fallback = f"API error: {status_code}"
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return fallback


class ChatCompletionClient:
    """`/api/chat`에 요청을 보내고 SSE 응답 바이트를 그대로 흘려보냅니다."""

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = to_httpx_timeout(timeout_seconds)
        self._transport = transport

    @classmethod
    def from_settings(cls, api_key: str | None = None) -> ChatCompletionClient:
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        return cls(
            settings.CHAT_API_URL,
            api_key=api_key,
            timeout_seconds=timeout_policy.completion_timeout_seconds,
        )

    async def stream(self, payload: dict[str, Any]) -> AsyncIterator[bytes]:
        """요청 본문을 보내고 응답 청크를 순서대로 반환합니다.

        Raises:
            CompletionRequestError: 응답 상태가 2xx가 아닌 경우.
            httpx.HTTPError: 연결 실패나 타임아웃.
        """
        headers = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if self._api_key:
            headers["x-anthropic-key"] = self._api_key

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            async with client.stream("POST", self._url, json=payload, headers=headers) as response:
                if not response.is_success:
                    body = await response.aread()
                    message = _error_message(body, response.status_code)
                    logger.error("Chat request failed: status=%s message=%s", response.status_code, message)
                    raise CompletionRequestError(message, status_code=response.status_code)

                async for chunk in response.aiter_bytes():
                    yield chunk
