"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from eurotrip.api import auth, chat, endpoints, places
from eurotrip.api.dependencies import ApiError
from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.logging_config import configure_logging
from eurotrip.core.rate_limit import chat_limiter, client_ip
from eurotrip.core.timeout_policy import get_timeout_policy, to_httpx_timeout

configure_logging()
logger = get_logger(__name__)
settings = get_settings()


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _docs_enabled(mode: str) -> bool:
    normalized = (mode or "").strip().lower()
    if normalized not in {"disabled", "public"}:
        logger.warning("유효하지 않은 DOCS_MODE 값입니다. disabled로 대체합니다: %s", mode)
        return False
    return normalized == "public"


def _configure_trusted_hosts(app_: FastAPI) -> None:
    trusted_hosts = _split_csv(settings.TRUSTED_HOSTS)
    if not trusted_hosts:
        return

    app_.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


def _configure_cors(app_: FastAPI) -> None:
    origins = _split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return

    allow_credentials = settings.CORS_ALLOW_CREDENTIALS
    if "*" in origins and allow_credentials:
        logger.warning("CORS_ALLOW_ORIGINS에 '*'가 포함되어 allow_credentials를 false로 강제합니다.")
        allow_credentials = False

    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=_split_csv(settings.CORS_ALLOW_METHODS) or ["GET", "POST"],
        allow_headers=_split_csv(settings.CORS_ALLOW_HEADERS) or ["Content-Type"],
    )


@asynccontextmanager
async def lifespan(app_: FastAPI):
    """프로세스 단위 공유 httpx 클라이언트를 관리합니다."""
    timeout_policy = get_timeout_policy(settings)
    http_client = httpx.AsyncClient(timeout=to_httpx_timeout(timeout_policy.request_timeout_seconds))
    app_.state.http_client = http_client
    logger.info("EuroTrip server started: env=%s", settings.APP_ENV)
    try:
        yield
    finally:
        await http_client.aclose()


docs_enabled = _docs_enabled(settings.DOCS_MODE)

app = FastAPI(
    title="EuroTrip Planner API",
    lifespan=lifespan,
    docs_url="/docs" if docs_enabled else None,
    redoc_url="/redoc" if docs_enabled else None,
    openapi_url="/openapi.json" if docs_enabled else None,
)

app.state.limiter = chat_limiter

_configure_trusted_hosts(app)
_configure_cors(app)

app.include_router(chat.router)
app.include_router(places.router)
app.include_router(auth.router)
app.include_router(endpoints.router)


@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    """기본 보안 헤더를 응답에 추가합니다."""
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Cache-Control", "no-store")
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """API 오류를 `{"error": ...}` 형식으로 반환합니다."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """요청 빈도 초과를 429로 응답합니다."""
    logger.warning("Rate limit exceeded: client=%s limit=%s", client_ip(request), exc.detail)
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded. Please try again in a minute."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 예외를 표준 형식으로 처리합니다."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": message})


@app.get("/")
def health_check() -> dict:
    """헬스 체크 엔드포인트."""
    return {"status": "ok", "message": "EuroTrip Planner Server is running"}
