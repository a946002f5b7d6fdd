"""공용 비밀번호 게이트 API."""

import secrets

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.schemas.chat import AuthRequest

router = APIRouter(prefix="/api", tags=["auth"])
logger = get_logger(__name__)


@router.post("/auth")
def check_password(request: AuthRequest) -> JSONResponse:
    """`SITE_PASSWORD`가 없거나 일치하면 접근을 허용합니다."""
    site_password = get_settings().SITE_PASSWORD
    if not site_password:
        return JSONResponse(content={"ok": True})

    if request.password is not None and secrets.compare_digest(request.password, site_password):
        return JSONResponse(content={"ok": True})

    logger.info("Password gate rejected a request")
    return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"ok": False, "error": "Wrong password"})
