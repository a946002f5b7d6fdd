"""정류지 사이 경로 구간을 채우는 백그라운드 조회기."""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

from eurotrip.core.config import get_settings
from eurotrip.core.geo import straight_line
from eurotrip.core.logger import get_logger
from eurotrip.schemas.trip import Coordinates, RouteSegment, Stop, TripDocument
from eurotrip.store.actions import SetRouteSegments
from eurotrip.store.store import TripStore

logger = get_logger(__name__)

SegmentKey = tuple[str, str]


class DirectionsProvider(Protocol):
    async def fetch_segment(self, origin: Coordinates, destination: Coordinates) -> RouteSegment: ...


def fallback_segment(origin: Stop, destination: Stop) -> RouteSegment:
    """조회 실패 시 쓰는 페리/간접 구간 표시용 직선 구간."""
    return RouteSegment(
        from_stop_id=origin.id,
        to_stop_id=destination.id,
        geometry=straight_line(
            origin.coordinates.lat,
            origin.coordinates.lng,
            destination.coordinates.lat,
            destination.coordinates.lng,
        ),
        is_ferry=True,
    )


class RouteSegmentFetcher:
    """정류지 변경을 감지해 경로 구간을 조회하고 저장소에 반영합니다.

    구간 목록이 비어 있고 정류지가 2개 이상일 때 디바운스 후 조회를 시작합니다.
    조회 결과는 `(from_id, to_id)` 키로 캐시되어 다른 정류지 편집 뒤에도
    재사용됩니다. 조회 도중 정류지가 다시 바뀌면 이전 세대의 조회는 중단되고
    최신 세대의 결과만 반영됩니다.
    """

    def __init__(
        self,
        store: TripStore,
        directions: DirectionsProvider | None,
        *,
        debounce_seconds: float | None = None,
        request_delay_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._directions = directions
        self._debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.ROUTE_DEBOUNCE_SECONDS
        )
        self._request_delay_seconds = (
            request_delay_seconds if request_delay_seconds is not None else settings.ROUTE_REQUEST_DELAY_SECONDS
        )
        self.cache: dict[SegmentKey, RouteSegment] = {}
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._loading = False
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_loading(self) -> bool:
        return self._loading

    def attach(self) -> None:
        """저장소를 구독하고 현재 문서 기준으로 한 번 검사합니다."""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._on_change)
        self._maybe_schedule(self._store.document)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel()

    async def wait_until_idle(self) -> None:
        """진행 중인 조회(디바운스 포함)가 끝날 때까지 기다립니다."""
        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise

    def _on_change(self, previous: TripDocument, current: TripDocument) -> None:
        stops_changed = previous.stops is not current.stops
        if not stops_changed and previous.route_segments is current.route_segments:
            return
        if current.route_segments:
            if stops_changed:
                self._cancel()
            return
        self._cancel()
        self._maybe_schedule(current)

    def _cancel(self) -> None:
        self._generation += 1
        self._loading = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _maybe_schedule(self, document: TripDocument) -> None:
        if self._directions is None or document.route_segments or len(document.stops) < 2:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; route fetch skipped")
            return
        self._task = loop.create_task(self._run(self._generation))

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _run(self, generation: int) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if not self._is_current(generation):
            return

        stops = list(self._store.document.stops)
        pairs = list(zip(stops, stops[1:]))
        missing = [(origin, destination) for origin, destination in pairs if (origin.id, destination.id) not in self.cache]

        self._loading = True
        try:
            for index, (origin, destination) in enumerate(missing):
                if index > 0:
                    await asyncio.sleep(self._request_delay_seconds)
                if not self._is_current(generation):
                    return
                self.cache[(origin.id, destination.id)] = await self._fetch_pair(origin, destination)

            if not self._is_current(generation):
                return
            segments = [self.cache[(origin.id, destination.id)] for origin, destination in pairs]
            logger.info("Route segments ready: %d (fetched=%d)", len(segments), len(missing))
            self._store.dispatch(SetRouteSegments(segments=segments))
        finally:
            if self._is_current(generation):
                self._loading = False

    async def _fetch_pair(self, origin: Stop, destination: Stop) -> RouteSegment:
        try:
            segment = await self._directions.fetch_segment(origin.coordinates, destination.coordinates)
        except Exception as exc:
            logger.warning("Route fetch failed %s -> %s, using straight line: %s", origin.name, destination.name, exc)
            return fallback_segment(origin, destination)
        return segment.model_copy(update={"from_stop_id": origin.id, "to_stop_id": destination.id})
