"""API 의존성 모음."""

import httpx
from fastapi import Depends, Header, Request, status

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.services.anthropic_client import AnthropicMessagesClient

logger = get_logger(__name__)


class ApiError(Exception):
    """`{"error": message}` 형식으로 응답되는 API 오류."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_http_client(request: Request) -> httpx.AsyncClient:
    """애플리케이션 lifespan이 소유한 공유 `httpx` 클라이언트를 제공합니다."""
    return request.app.state.http_client


def get_anthropic_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),  # noqa: B008
) -> AnthropicMessagesClient:
    """Anthropic Messages API 클라이언트를 제공합니다."""
    return AnthropicMessagesClient.from_settings(http_client)


def require_api_key(
    x_anthropic_key: str | None = Header(default=None, alias="x-anthropic-key"),
) -> str:
    """사용자 제공 키를 우선하고, 없으면 서버 설정 키를 사용합니다."""
    api_key = x_anthropic_key or get_settings().ANTHROPIC_API_KEY
    if not api_key:
        logger.info("Request rejected: no API key available")
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED,
            "API key required. Please provide your Anthropic API key.",
        )
    return api_key
