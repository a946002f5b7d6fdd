"""터미널에서 여행 플래너 대화를 수동으로 확인하는 스크립트.

실행 전 `uvicorn eurotrip.main:app`으로 채팅 프록시 서버를 띄워 두어야 합니다.
"""

import asyncio
import os

from eurotrip.core.config import get_settings
from eurotrip.schemas.enums import ChatRole, ChatStatus
from eurotrip.services.chat_service import ChatOrchestrator
from eurotrip.services.completion_client import ChatCompletionClient
from eurotrip.services.directions_service import get_directions_service
from eurotrip.services.route_fetcher import RouteSegmentFetcher
from eurotrip.store.actions import Reset
from eurotrip.store.persistence import FileTripStorage, TripPersister, load_trip_document
from eurotrip.store.store import TripStore


def _print_turn(orchestrator: ChatOrchestrator, start_index: int) -> None:
    for message in orchestrator.messages[start_index:]:
        if message.role != ChatRole.ASSISTANT:
            continue
        if message.content:
            print(f"\n🤖 {message.content}")
        for tool_call in message.tool_calls or []:
            print(f"   🔧 {tool_call.name}: {tool_call.result or '...'}")
    if orchestrator.status == ChatStatus.ERROR:
        print(f"❌ 오류: {orchestrator.error}")


def _print_trip(store: TripStore) -> None:
    document = store.document
    if not document.stops:
        print("🗺️  아직 계획된 여행이 없습니다.")
        return
    route = " → ".join(stop.name for stop in document.stops)
    print(f"🗺️  {route} (구간 {len(document.route_segments)}개)")


async def main() -> None:
    settings = get_settings()
    storage = FileTripStorage.from_settings()
    store = TripStore()
    if store.hydrate(load_trip_document(storage)):
        print("📂 저장된 여행을 불러왔습니다.")

    persister = TripPersister(store, storage)
    persister.attach()
    route_fetcher = RouteSegmentFetcher(store, get_directions_service())
    route_fetcher.attach()

    client = ChatCompletionClient.from_settings(api_key=os.getenv("ANTHROPIC_API_KEY"))
    orchestrator = ChatOrchestrator(store, client, currency=os.getenv("TRIP_CURRENCY", "EUR"))

    print(f"🚗 EuroTrip 플래너 ({settings.CHAT_API_URL}) - /reset, /trip, /quit")
    try:
        while True:
            text = (await asyncio.to_thread(input, "\n> ")).strip()
            if text == "/quit":
                break
            if text == "/reset":
                orchestrator.reset()
                store.dispatch(Reset())
                storage.clear()
                print("🧹 대화와 여행을 초기화했습니다.")
                continue
            if text == "/trip":
                _print_trip(store)
                continue

            start_index = len(orchestrator.messages)
            if await orchestrator.send_message(text):
                _print_turn(orchestrator, start_index)
                await route_fetcher.wait_until_idle()
                _print_trip(store)
    except (EOFError, KeyboardInterrupt):
        print()
    finally:
        orchestrator.stop()
        route_fetcher.close()
        persister.close()


if __name__ == "__main__":
    asyncio.run(main())
