"""SSE 디코더 테스트."""

import pytest

from eurotrip.streaming.sse import SSEDecoder, format_sse_event
from tests.mocks.mock_completion_client import stop_event, text_events, to_chunks, tool_events

EVENTS = [
    *text_events("Grüezi! Fondue in Zürich 🧀"),
    *tool_events("toolu_1", "update_trip", {"name": "Schweiz"}),
    *stop_event("tool_use"),
]


def _decode(chunks: list[bytes]) -> list[tuple[str, dict]]:
    decoder = SSEDecoder()
    events = []
    for chunk in chunks:
        events.extend(decoder.feed(chunk))
    events.extend(decoder.finish())
    return [(event.event, event.data) for event in events]


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 64])
def test_chunk_boundaries_do_not_change_events(chunk_size):
    expected = _decode(to_chunks(EVENTS))

    assert _decode(to_chunks(EVENTS, chunk_size)) == expected
    assert [name for name, _ in expected][:2] == ["content_block_start", "content_block_delta"]
    assert expected[1][1]["delta"]["text"] == "Grüezi! Fondue in Zürich 🧀"


def test_skips_done_blank_and_malformed_lines():
    raw = b"data: [DONE]\ndata: \ndata: {broken\n: comment\ndata: [1, 2]\ndata: {\"type\": \"ping\"}\n"

    assert _decode([raw]) == [("ping", {"type": "ping"})]


def test_event_line_overrides_payload_type():
    raw = b"event: error\r\ndata: {\"type\": \"api_error\", \"status\": 401}\r\n\r\n"

    assert _decode([raw]) == [("error", {"type": "api_error", "status": 401})]


def test_unterminated_final_line_is_processed_on_finish():
    decoder = SSEDecoder()

    assert decoder.feed(b'data: {"type": "message_stop"}') == []
    assert [event.event for event in decoder.finish()] == ["message_stop"]


def test_format_sse_event_round_trips_through_decoder():
    encoded = format_sse_event("error", {"type": "api_error", "message": "Überlastet"})

    assert encoded.endswith(b"\n\n")
    assert _decode([encoded]) == [("error", {"type": "api_error", "message": "Überlastet"})]
