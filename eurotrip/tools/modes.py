"""여행 모드별 추천 후처리 훅.

인터프리터는 모드와 무관하게 추천 활동을 추가하고, 점수나 수집 기록 같은
모드 전용 상태는 현재 `metadata.mode`에 등록된 훅이 액션으로 만들어 냅니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from eurotrip.schemas.enums import ActivityCategory, BurgerRarity, TripMode
from eurotrip.schemas.trip import BurgerAchievement, TripDocument
from eurotrip.store.actions import TripAction, UpdateTripMetadata
from eurotrip.tools.coercion import RecommendationItem


@dataclass(frozen=True, slots=True)
class PlacedRecommendations:
    """실제로 정류지에 추가된 추천 묶음."""

    stop_name: str
    items: list[RecommendationItem]


class ModeHook(Protocol):
    def after_recommendations(
        self,
        category: ActivityCategory,
        placed: list[PlacedRecommendations],
        document: TripDocument,
    ) -> list[TripAction]: ...


_RARITY_POINTS = {
    BurgerRarity.LEGENDARY: 10,
    BurgerRarity.RARE: 5,
    BurgerRarity.COMMON: 2,
}


def classify_rarity(description: str | None) -> BurgerRarity:
    lowered = (description or "").lower()
    if "legendary" in lowered:
        return BurgerRarity.LEGENDARY
    if "rare" in lowered:
        return BurgerRarity.RARE
    return BurgerRarity.COMMON


class BurgerChallengeHook:
    """버거 챌린지 점수와 수집 목록을 누적합니다.

    설명이 있는 버거만 점수를 얻습니다. 추가된 버거가 없어도 현재 값을
    다시 기록하는 메타데이터 패치를 하나 만듭니다.
    """

    def after_recommendations(
        self,
        category: ActivityCategory,
        placed: list[PlacedRecommendations],
        document: TripDocument,
    ) -> list[TripAction]:
        if category != ActivityCategory.BURGER:
            return []

        metadata = document.metadata
        score = metadata.burger_score or 0
        achievements = list(metadata.burgers_collected or [])

        for group in placed:
            for item in group.items:
                if not item.description:
                    continue
                rarity = classify_rarity(item.description)
                score += _RARITY_POINTS[rarity]
                achievements.append(
                    BurgerAchievement(
                        city=group.stop_name,
                        restaurant_name=item.restaurant_name,
                        specialty=item.specialty,
                        rarity=rarity,
                        collected=True,
                    )
                )

        return [UpdateTripMetadata(updates={"burger_score": score, "burgers_collected": achievements})]


MODE_HOOKS: dict[str, ModeHook] = {
    TripMode.BURGER_CHALLENGE: BurgerChallengeHook(),
}


def get_mode_hook(mode: str | None) -> ModeHook | None:
    if not mode:
        return None
    return MODE_HOOKS.get(mode)
