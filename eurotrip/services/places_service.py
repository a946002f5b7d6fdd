"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod

from eurotrip.schemas.place import NearbyPlace


class PlacesServiceProtocol(ABC):
    """주변 장소 검색을 위한 인터페이스를 정의합니다."""

    @abstractmethod
    async def search_nearby(self, lat: float, lng: float, query: str) -> list[NearbyPlace]:
        """좌표 주변에서 검색어에 맞는 장소를 찾습니다.

        Args:
            lat: 중심 위도
            lng: 중심 경도
            query: 검색 키워드

        Returns:
            최소 평점 필터링이 적용된 장소 목록. 실패 시 빈 목록.
        """
        raise NotImplementedError
