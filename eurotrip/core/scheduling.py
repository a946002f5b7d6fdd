"""이벤트 루프 기반 지연 실행 유틸."""

from __future__ import annotations

import asyncio
from typing import Callable

from eurotrip.core.logger import get_logger

logger = get_logger(__name__)

Callback = Callable[[], None]


class FrameScheduler:
    """반복 요청을 화면 갱신 주기당 최대 1회의 flush로 합칩니다.

    이미 예약된 flush가 있으면 새 요청은 콜백만 교체하고 타이머는 그대로 둡니다.
    """

    def __init__(self, interval_seconds: float = 1 / 60) -> None:
        self._interval_seconds = max(0.0, float(interval_seconds))
        self._handle: asyncio.TimerHandle | None = None
        self._callback: Callback | None = None

    @property
    def pending(self) -> bool:
        return self._callback is not None

    def request(self, callback: Callback) -> None:
        """다음 tick에 실행할 flush를 예약합니다."""
        self._callback = callback
        if self._handle is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush_now()
            return
        self._handle = loop.call_later(self._interval_seconds, self.flush_now)

    def flush_now(self) -> None:
        """예약된 flush를 즉시 실행합니다."""
        callback = self._callback
        self.cancel()
        if callback is not None:
            callback()

    def cancel(self) -> None:
        """예약된 flush를 실행하지 않고 폐기합니다."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None


class Debouncer:
    """마지막 호출 이후 delay가 지나야 콜백을 실행합니다."""

    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = max(0.0, float(delay_seconds))
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, callback: Callback) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()

        def _run() -> None:
            self._handle = None
            try:
                callback()
            except Exception:
                logger.exception("Debounced callback failed")

        self._handle = loop.call_later(self._delay_seconds, _run)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
