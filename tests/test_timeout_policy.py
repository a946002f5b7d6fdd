"""타임아웃 정책 유틸 테스트."""

from eurotrip.core.config import Settings
from eurotrip.core.timeout_policy import build_timeout_policy, to_httpx_timeout, to_requests_timeout


def test_build_timeout_policy_caps_by_request_timeout() -> None:
    settings = Settings(
        REQUEST_TIMEOUT_SECONDS=20,
        COMPLETION_TIMEOUT_SECONDS=60,
        EXTERNAL_API_TIMEOUT_SECONDS=50,
        DIRECTIONS_TIMEOUT_SECONDS=30,
        GOOGLE_PLACES_TIMEOUT_SECONDS=25,
    )

    policy = build_timeout_policy(settings)

    assert policy.request_timeout_seconds == 20
    assert policy.completion_timeout_seconds == 20
    assert policy.external_api_timeout_seconds == 20
    assert policy.directions_timeout_seconds == 20
    assert policy.google_places_timeout_seconds == 20


def test_external_timeouts_are_capped_by_external_api_timeout() -> None:
    settings = Settings(EXTERNAL_API_TIMEOUT_SECONDS=5, DIRECTIONS_TIMEOUT_SECONDS=10, GOOGLE_PLACES_TIMEOUT_SECONDS=0)

    policy = build_timeout_policy(settings)

    assert policy.directions_timeout_seconds == 5
    assert policy.google_places_timeout_seconds == 1


def test_to_requests_timeout_returns_connect_and_read_timeout() -> None:
    connect_timeout, read_timeout = to_requests_timeout(10)

    assert connect_timeout == 3.0
    assert read_timeout == 7.0


def test_to_httpx_timeout_uses_same_split() -> None:
    timeout = to_httpx_timeout(10)

    assert timeout.connect == 3.0
    assert timeout.read == 7.0
