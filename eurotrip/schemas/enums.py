"""도메인 열거형 정의."""

from enum import StrEnum


class ActivityCategory(StrEnum):
    """활동 카테고리."""

    SIGHTSEEING = "sightseeing"
    FOOD = "food"
    ADVENTURE = "adventure"
    CULTURE = "culture"
    RELAXATION = "relaxation"
    NIGHTLIFE = "nightlife"
    SHOPPING = "shopping"
    BURGER = "burger"
    FONDUE = "fondue"


class AccommodationType(StrEnum):
    """숙소 유형."""

    HOTEL = "hotel"
    HOSTEL = "hostel"
    AIRBNB = "airbnb"
    CAMPING = "camping"
    OTHER = "other"


class TripMode(StrEnum):
    """여행 모드."""

    STANDARD = "standard"
    BURGER_CHALLENGE = "burger_challenge"


class BurgerRarity(StrEnum):
    """버거 챌린지 수집 등급."""

    COMMON = "common"
    RARE = "rare"
    LEGENDARY = "legendary"


class ChatRole(StrEnum):
    """대화 메시지 역할."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatStatus(StrEnum):
    """대화 턴 진행 상태."""

    IDLE = "idle"
    STREAMING = "streaming"
    PROCESSING_TOOLS = "processing_tools"
    ERROR = "error"


class StopReason(StrEnum):
    """제공자가 응답 스트림을 종료한 사유."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
