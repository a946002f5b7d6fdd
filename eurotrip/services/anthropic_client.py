"""Anthropic Messages API 호출 클라이언트(서버 측)."""

from __future__ import annotations

from typing import Any

import httpx

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.timeout_policy import get_timeout_policy, to_httpx_timeout

logger = get_logger(__name__)


class AnthropicMessagesClient:
    """Messages API 페이로드를 만들고 스트리밍 응답을 엽니다.

    httpx.AsyncClient는 호출 측(애플리케이션 lifespan)이 소유합니다.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str,
        version: str,
        model: str,
        max_tokens: int,
        timeout_seconds: int = 120,
    ) -> None:
        self._client = client
        self._url = url
        self._version = version
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = to_httpx_timeout(timeout_seconds)

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient) -> AnthropicMessagesClient:
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        return cls(
            client,
            url=settings.ANTHROPIC_API_URL,
            version=settings.ANTHROPIC_VERSION,
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.ANTHROPIC_MAX_TOKENS,
            timeout_seconds=timeout_policy.completion_timeout_seconds,
        )

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": self._version,
        }

    def build_payload(
        self,
        *,
        messages: list[dict[str, Any]],
        system: str,
        tools: list[dict[str, Any]],
    ) -> dict[str, Any]:
        return {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "system": system,
            "tools": tools,
            "messages": messages,
            "stream": True,
        }

    async def open_stream(self, api_key: str, payload: dict[str, Any]) -> httpx.Response:
        """스트리밍 응답을 열어 반환합니다. 호출 측이 `aclose()`해야 합니다.

        Raises:
            httpx.TimeoutException: 응답 헤더를 기한 내에 받지 못한 경우.
            httpx.HTTPError: 그 밖의 전송 오류.
        """
        request = self._client.build_request(
            "POST",
            self._url,
            json=payload,
            headers=self._headers(api_key),
            timeout=self._timeout,
        )
        response = await self._client.send(request, stream=True)
        logger.info("Anthropic stream opened: status=%s model=%s", response.status_code, self._model)
        return response

    async def create_message(self, api_key: str, *, model: str, max_tokens: int = 10) -> httpx.Response:
        """스트리밍 없이 최소 요청을 보냅니다. 키 검증에 사용합니다."""
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": "test"}],
        }
        return await self._client.post(self._url, json=payload, headers=self._headers(api_key), timeout=self._timeout)
