"""여행 문서 상태 저장소."""

from __future__ import annotations

from typing import Callable

from eurotrip.core.logger import get_logger
from eurotrip.schemas.trip import TripDocument
from eurotrip.store.actions import LoadState, TripAction
from eurotrip.store.reducer import IdFactory, apply, create_default_document, default_id_factory

logger = get_logger(__name__)

Listener = Callable[[TripDocument, TripDocument], None]


class TripStore:
    """리듀서를 유일한 쓰기 경로로 갖는 단일 문서 저장소.

    `dispatch`는 동기적으로 리듀서를 적용한 뒤 구독자에게 `(previous, current)`를
    구독 순서대로 전달합니다. 문서가 바뀌지 않은 액션은 알림을 보내지 않습니다.
    """

    def __init__(self, document: TripDocument | None = None, *, id_factory: IdFactory = default_id_factory) -> None:
        self._document = document if document is not None else create_default_document()
        self._id_factory = id_factory
        self._listeners: list[Listener] = []

    @property
    def document(self) -> TripDocument:
        return self._document

    @property
    def id_factory(self) -> IdFactory:
        return self._id_factory

    def dispatch(self, action: TripAction) -> TripDocument:
        previous = self._document
        current = apply(previous, action, id_factory=self._id_factory)
        if current is previous:
            return current

        self._document = current
        logger.debug("Applied %s (stops=%d)", type(action).__name__, len(current.stops))
        for listener in list(self._listeners):
            listener(previous, current)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """리스너를 등록하고 해제 함수를 반환합니다."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def hydrate(self, document: TripDocument | None) -> bool:
        """저장된 문서에 정류지가 있을 때만 불러옵니다."""
        if document is None or not document.stops:
            return False
        self.dispatch(LoadState(document=document))
        return True
