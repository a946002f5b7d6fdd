"""채팅 요청 빈도 제한 설정."""

from slowapi import Limiter
from starlette.requests import Request

from eurotrip.core.config import get_settings


def client_ip(request: Request) -> str:
    """프록시 헤더 우선으로 클라이언트 식별자를 결정합니다."""
    return request.headers.get("x-forwarded-for") or request.headers.get("x-real-ip") or "unknown"


def chat_rate_limit() -> str:
    """현재 설정으로 채팅 요청 제한 문자열을 만듭니다. 요청마다 평가됩니다."""
    settings = get_settings()
    return f"{settings.CHAT_RATE_LIMIT}/{settings.CHAT_RATE_WINDOW_SECONDS} seconds"


# 고정 윈도, 프로세스 메모리 저장소
chat_limiter = Limiter(key_func=client_ip, headers_enabled=False)
