"""요청 빈도 제한 설정 테스트."""

from starlette.requests import Request

from eurotrip.core.config import get_settings
from eurotrip.core.rate_limit import chat_rate_limit, client_ip


def _request(headers: dict[str, str]) -> Request:
    raw_headers = [(key.encode("latin-1"), value.encode("latin-1")) for key, value in headers.items()]
    return Request({"type": "http", "method": "POST", "path": "/api/chat", "headers": raw_headers})


def test_client_ip_prefers_forwarded_for() -> None:
    request = _request({"x-forwarded-for": "203.0.113.7", "x-real-ip": "10.0.0.1"})

    assert client_ip(request) == "203.0.113.7"


def test_client_ip_falls_back_to_real_ip_then_unknown() -> None:
    assert client_ip(_request({"x-real-ip": "10.0.0.1"})) == "10.0.0.1"
    assert client_ip(_request({})) == "unknown"


def test_chat_rate_limit_reads_current_settings(monkeypatch) -> None:
    monkeypatch.setenv("CHAT_RATE_LIMIT", "10")
    monkeypatch.setenv("CHAT_RATE_WINDOW_SECONDS", "60")
    get_settings.cache_clear()

    assert chat_rate_limit() == "10/60 seconds"

    monkeypatch.setenv("CHAT_RATE_LIMIT", "3")
    get_settings.cache_clear()

    assert chat_rate_limit() == "3/60 seconds"
    get_settings.cache_clear()
