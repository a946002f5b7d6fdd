"""대화 턴 오케스트레이터."""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from eurotrip.core.config import get_settings
from eurotrip.core.logger import get_logger
from eurotrip.core.scheduling import FrameScheduler
from eurotrip.graph.chat.state import ChatTurnState, CompletionStreamer, TurnContext
from eurotrip.graph.chat.workflow import compiled_chat_graph, recursion_limit_for
from eurotrip.schemas.chat import ChatMessage
from eurotrip.schemas.enums import ChatRole, ChatStatus, StopReason
from eurotrip.store.store import TripStore

logger = get_logger(__name__)

ChangeListener = Callable[[], None]

_UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ChatOrchestrator:
    """사용자 턴 하나를 여러 라운드의 스트리밍 요청으로 진행합니다.

    동시에 하나의 턴만 진행하며, 진행 중에 들어온 입력은 대기열에 넣지 않고
    거부합니다. `stop()`은 진행 중인 요청과 대기 중인 텍스트 반영을 취소하고
    이미 반영된 부분 텍스트는 그대로 둔 채 즉시 `idle`로 돌아갑니다.
    """

    def __init__(
        self,
        store: TripStore,
        client: CompletionStreamer,
        *,
        max_rounds: int | None = None,
        frame_interval_seconds: float | None = None,
        strict_stop_names: bool | None = None,
        user_location: str | None = None,
        language: str | None = None,
        currency: str | None = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self._client = client
        self._max_rounds = max_rounds if max_rounds is not None else settings.CHAT_MAX_CONTINUATION_ROUNDS
        self._frame_interval_seconds = (
            frame_interval_seconds if frame_interval_seconds is not None else settings.CHAT_FRAME_INTERVAL_SECONDS
        )
        self._strict_stop_names = (
            strict_stop_names if strict_stop_names is not None else settings.RECOMMENDATION_STRICT_STOP_NAMES
        )
        self.user_location = user_location
        self.language = language
        self.currency = currency

        self.messages: list[ChatMessage] = []
        self.status = ChatStatus.IDLE
        self.error: str | None = None

        self._listeners: list[ChangeListener] = []
        self._task: asyncio.Task | None = None
        self._abort: asyncio.Event | None = None
        self._frame_scheduler: FrameScheduler | None = None

    @property
    def is_busy(self) -> bool:
        return self._abort is not None

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _set_status(self, status: ChatStatus) -> None:
        self.status = status
        self._notify()

    def build_payload(self, api_messages: list[dict[str, Any]]) -> dict[str, Any]:
        """프록시 요청 본문을 만듭니다. 여행 문서는 요청 시점의 최신 상태를 씁니다."""
        return {
            "messages": api_messages,
            "tripState": self._store.document.model_dump(mode="json"),
            "userLocation": self.user_location,
            "language": self.language,
            "currency": self.currency,
        }

    async def send_message(self, text: str) -> bool:
        """사용자 메시지로 새 턴을 시작하고 턴이 끝날 때까지 기다립니다.

        Returns:
            턴을 시작했으면 True, 빈 입력이거나 다른 턴이 진행 중이면 False.
        """
        content = text.strip()
        if not content or self.is_busy:
            return False

        abort = asyncio.Event()
        # 턴마다 별도 스케줄러. 이전 턴의 정리가 새 턴의 flush를 지우지 않음
        frame_scheduler = FrameScheduler(self._frame_interval_seconds)
        self._abort = abort
        self._frame_scheduler = frame_scheduler
        self.error = None
        self.messages.append(ChatMessage(role=ChatRole.USER, content=content))
        self._notify()

        task = asyncio.create_task(self._run_turn(abort, frame_scheduler))
        self._task = task
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info("Chat turn cancelled")
        return True

    async def _run_turn(self, abort: asyncio.Event, frame_scheduler: FrameScheduler) -> None:
        context = TurnContext(
            store=self._store,
            client=self._client,
            messages=self.messages,
            abort=abort,
            frame_scheduler=frame_scheduler,
            build_payload=self.build_payload,
            set_status=self._set_status,
            notify=self._notify,
            strict_stop_names=self._strict_stop_names,
        )
        initial_state: ChatTurnState = {"round": 0, "max_rounds": self._max_rounds, "pending_tool_results": None}

        try:
            result = await compiled_chat_graph.ainvoke(
                initial_state,
                config={
                    "configurable": {"turn": context},
                    "recursion_limit": recursion_limit_for(self._max_rounds),
                },
            )
            if self._abort is abort:
                if result.get("round", 0) >= self._max_rounds and result.get("stop_reason") == StopReason.TOOL_USE:
                    logger.warning("Chat turn reached max continuation rounds (%d)", self._max_rounds)
                self._set_status(ChatStatus.IDLE)
        except Exception as exc:
            if self._abort is abort:
                logger.exception("Chat turn failed")
                self.error = str(exc) or _UNEXPECTED_ERROR_MESSAGE
                self._set_status(ChatStatus.ERROR)
        finally:
            frame_scheduler.cancel()
            if self._abort is abort:
                self._abort = None
                self._task = None
                self._frame_scheduler = None

    def stop(self) -> None:
        """진행 중인 턴을 취소하고 즉시 idle로 전환합니다."""
        abort, task, frame_scheduler = self._abort, self._task, self._frame_scheduler
        if abort is None:
            return
        abort.set()
        if frame_scheduler is not None:
            frame_scheduler.cancel()
        if task is not None and not task.done():
            task.cancel()
        self._abort = None
        self._task = None
        self._frame_scheduler = None
        self._set_status(ChatStatus.IDLE)

    def reset(self) -> None:
        self.stop()
        self.messages.clear()
        self.error = None
        self._set_status(ChatStatus.IDLE)
