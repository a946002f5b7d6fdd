"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    ANTHROPIC_API_KEY: str | None = None
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION: str = "2023-06-01"
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5"
    ANTHROPIC_KEY_TEST_MODEL: str = "claude-3-haiku-20240307"
    ANTHROPIC_MAX_TOKENS: int = 4096
    CHAT_API_URL: str = "http://localhost:8000/api/chat"
    CHAT_MAX_CONTINUATION_ROUNDS: int = 10
    CHAT_MAX_MESSAGES: int = 100
    CHAT_FRAME_INTERVAL_SECONDS: float = 1 / 60
    CHAT_RATE_LIMIT: int = 30
    CHAT_RATE_WINDOW_SECONDS: int = 60
    REQUEST_TIMEOUT_SECONDS: int = 120
    COMPLETION_TIMEOUT_SECONDS: int = 120
    EXTERNAL_API_TIMEOUT_SECONDS: int = 15
    DIRECTIONS_TIMEOUT_SECONDS: int = 10
    MAPBOX_TOKEN: str | None = None
    MAPBOX_DIRECTIONS_URL: str = "https://api.mapbox.com/directions/v5/mapbox/driving"
    ROUTE_DEBOUNCE_SECONDS: float = 0.3
    ROUTE_REQUEST_DELAY_SECONDS: float = 0.1
    GOOGLE_PLACES_API_KEY: str | None = None
    GOOGLE_PLACES_TIMEOUT_SECONDS: int = 10
    GOOGLE_PLACES_MIN_RATING: float = 4.5
    GOOGLE_PLACES_RADIUS_METERS: int = 5000
    GOOGLE_PLACES_DEFAULT_QUERY: str = "burger restaurant"
    SITE_PASSWORD: str | None = None
    TRIP_STORAGE_DIR: str = ".eurotrip"
    TRIP_STORAGE_KEY: str = "eurotrip_state"
    TRIP_PERSIST_DEBOUNCE_SECONDS: float = 0.5
    RECOMMENDATION_STRICT_STOP_NAMES: bool = False
    APP_ENV: str = "development"
    DOCS_MODE: str = "disabled"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = ""
    CORS_ALLOW_METHODS: str = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type,x-anthropic-key"
    CORS_ALLOW_CREDENTIALS: bool = False
    SECURITY_HEADERS_ENABLED: bool = True
    TRUSTED_HOSTS: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("GOOGLE_PLACES_MIN_RATING", mode="before")
    @classmethod
    def _clamp_google_places_min_rating(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 4.5
        except (TypeError, ValueError):
            numeric = 4.5
        return min(5.0, max(0.0, numeric))

    @field_validator("CHAT_MAX_CONTINUATION_ROUNDS", mode="before")
    @classmethod
    def _clamp_chat_max_continuation_rounds(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 10
        except (TypeError, ValueError):
            numeric = 10
        return min(50, max(1, numeric))


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
