"""보조 API 엔드포인트 정의."""

import httpx
from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from eurotrip.api.dependencies import get_anthropic_client
from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.services.anthropic_client import AnthropicMessagesClient

router = APIRouter(prefix="/api", tags=["settings"])
logger = get_logger(__name__)


@router.post("/test-key")
async def test_api_key(
    x_anthropic_key: str | None = Header(default=None, alias="x-anthropic-key"),
    client: AnthropicMessagesClient = Depends(get_anthropic_client),  # noqa: B008
) -> JSONResponse:
    """최소 토큰 요청으로 사용자 API 키를 검증합니다."""
    if not x_anthropic_key:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "No API key provided"})

    try:
        response = await client.create_message(x_anthropic_key, model=get_settings().ANTHROPIC_KEY_TEST_MODEL)
    except httpx.HTTPError as exc:
        logger.error("API key test request failed: %s", exc)
        response = None

    if response is None or not response.is_success:
        if response is not None:
            logger.info("API key test rejected: status=%s", response.status_code)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid API key or authentication failed"},
        )
    return JSONResponse(content={"ok": True})


@router.get("/mapbox-token")
def mapbox_token() -> JSONResponse:
    """지도 렌더링용 Mapbox 토큰을 반환합니다."""
    token = get_settings().MAPBOX_TOKEN
    if not token:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Mapbox token not configured"},
        )
    return JSONResponse(content={"token": token})
