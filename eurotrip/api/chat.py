"""채팅 스트리밍 프록시 API."""

import json
from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError
from starlette.background import BackgroundTask

from eurotrip.api.dependencies import get_anthropic_client, require_api_key
from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.rate_limit import chat_limiter, chat_rate_limit
from eurotrip.schemas.chat import ChatProxyRequest
from eurotrip.schemas.trip import TripDocument
from eurotrip.services.anthropic_client import AnthropicMessagesClient
from eurotrip.services.system_prompt import build_system_prompt
from eurotrip.store.reducer import create_default_document
from eurotrip.streaming.sse import format_sse_event
from eurotrip.tools.definitions import get_trip_tools

router = APIRouter(prefix="/api", tags=["chat"])
logger = get_logger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _resolve_trip_document(trip_state: dict[str, Any] | None) -> TripDocument:
    if trip_state is None:
        return create_default_document()
    try:
        return TripDocument.model_validate(trip_state)
    except ValidationError as exc:
        logger.warning("Invalid tripState ignored: %s", exc.error_count())
        return create_default_document()


async def _parse_body(request: Request) -> ChatProxyRequest | JSONResponse:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    messages = body.get("messages") if isinstance(body, dict) else None
    if not isinstance(messages, list) or not messages:
        return _error(status.HTTP_400_BAD_REQUEST, "Messages array required")
    if len(messages) > get_settings().CHAT_MAX_MESSAGES:
        return _error(status.HTTP_400_BAD_REQUEST, "Too many messages")

    try:
        return ChatProxyRequest.model_validate(body)
    except ValidationError as exc:
        logger.warning("Chat request body rejected: errors=%d", exc.error_count())
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")


@router.post("/chat")
@chat_limiter.limit(chat_rate_limit)
async def chat_proxy(
    request: Request,
    api_key: str = Depends(require_api_key),  # noqa: B008
    client: AnthropicMessagesClient = Depends(get_anthropic_client),  # noqa: B008
) -> Response:
    """대화 기록과 여행 상태로 Messages API 스트림을 열어 그대로 중계합니다.

    요청 빈도 제한은 API 키 확인 이후에 적용됩니다.
    """
    parsed = await _parse_body(request)
    if isinstance(parsed, JSONResponse):
        return parsed

    document = _resolve_trip_document(parsed.trip_state)
    payload = client.build_payload(
        messages=parsed.messages,
        system=build_system_prompt(document, parsed.user_location, parsed.language, parsed.currency),
        tools=get_trip_tools(parsed.currency or "EUR"),
    )
    logger.info("Chat proxy request: messages=%d stops=%d", len(parsed.messages), len(document.stops))

    try:
        upstream = await client.open_stream(api_key, payload)
    except httpx.TimeoutException:
        logger.error("Chat proxy upstream timed out")
        return _error(status.HTTP_504_GATEWAY_TIMEOUT, "Request timed out")
    except httpx.HTTPError as exc:
        logger.exception("Chat proxy upstream request failed", exc_info=exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    if not upstream.is_success:
        try:
            error_body = (await upstream.aread()).decode("utf-8", errors="replace")
        except httpx.HTTPError:
            error_body = ""
        finally:
            await upstream.aclose()
        logger.error("Chat proxy upstream error: status=%s", upstream.status_code)
        event = format_sse_event(
            "error",
            {
                "type": "api_error",
                "status": upstream.status_code,
                "message": error_body or "Anthropic API error",
            },
        )
        return Response(content=event, status_code=status.HTTP_200_OK, media_type="text/event-stream", headers=SSE_HEADERS)

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(upstream.aclose),
    )
