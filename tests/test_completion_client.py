"""채팅 프록시 스트리밍 클라이언트 테스트."""

import json

import httpx
import pytest

from eurotrip.services.completion_client import ChatCompletionClient, CompletionRequestError


async def _collect(client: ChatCompletionClient, payload: dict) -> bytes:
    chunks = [chunk async for chunk in client.stream(payload)]
    return b"".join(chunks)


@pytest.mark.asyncio
async def test_stream_yields_response_bytes_and_sends_key() -> None:
    captured: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, content=b"event: message_stop\ndata: {}\n\n")

    client = ChatCompletionClient(
        "http://testserver/api/chat",
        api_key="sk-ant-user",
        transport=httpx.MockTransport(_handler),
    )

    body = await _collect(client, {"messages": [{"role": "user", "content": "hi"}]})

    assert body == b"event: message_stop\ndata: {}\n\n"
    assert captured[0].headers["x-anthropic-key"] == "sk-ant-user"
    assert json.loads(captured[0].content) == {"messages": [{"role": "user", "content": "hi"}]}


@pytest.mark.asyncio
async def test_key_header_omitted_without_key() -> None:
    captured: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, content=b"")

    client = ChatCompletionClient("http://testserver/api/chat", transport=httpx.MockTransport(_handler))

    await _collect(client, {"messages": []})

    assert "x-anthropic-key" not in captured[0].headers


@pytest.mark.asyncio
async def test_error_field_becomes_message() -> None:
    client = ChatCompletionClient(
        "http://testserver/api/chat",
        transport=httpx.MockTransport(lambda request: httpx.Response(429, json={"error": "Rate limit exceeded."})),
    )

    with pytest.raises(CompletionRequestError) as exc_info:
        await _collect(client, {"messages": []})

    assert str(exc_info.value) == "Rate limit exceeded."
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_non_json_error_uses_status_message() -> None:
    client = ChatCompletionClient(
        "http://testserver/api/chat",
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway")),
    )

    with pytest.raises(CompletionRequestError, match="API error: 502"):
        await _collect(client, {"messages": []})
