"""Tests for chat completion."""

import json

import httpx
import pytest

from speechbridge.config import Settings
from speechbridge.errors import DecodeError, EmptyBodyError, HTTPStatusError
from speechbridge.providers import llm
from speechbridge.providers.llm import DEFAULT_ASSISTANT_PROMPT, ChatClient, ChatMessage


def completion(*contents):
    return {"choices": [{"message": {"role": "assistant", "content": c}} for c in contents]}


@pytest.mark.asyncio
async def test_message_order_and_first_choice(api_key):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=completion("first", "second"))

    client = ChatClient(api_key, transport=httpx.MockTransport(handler))
    history = [
        ChatMessage(role="user", content="hi"),
        ChatMessage(role="assistant", content="hello"),
    ]
    reply = await client.prompt("how are you?", previous=history)

    assert reply == "first"
    assert str(seen[0].url) == "https://api.openai.com/v1/chat/completions"
    assert seen[0].headers["authorization"] == "Bearer sk-test-key"
    body = json.loads(seen[0].content)
    assert body["model"] == "gpt-4"
    assert body["messages"] == [
        {"role": "assistant", "content": DEFAULT_ASSISTANT_PROMPT},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "how are you?"},
    ]


@pytest.mark.asyncio
async def test_custom_model_and_assistant_prompt(api_key):
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=completion("ok"))

    client = ChatClient(api_key, transport=httpx.MockTransport(handler))
    await client.prompt("q", model="gpt-4o-mini", assistant_prompt="Be brief.")

    assert seen[0]["model"] == "gpt-4o-mini"
    assert seen[0]["messages"][0] == {"role": "assistant", "content": "Be brief."}


@pytest.mark.asyncio
async def test_status_error(api_key):
    client = ChatClient(
        api_key, transport=httpx.MockTransport(lambda request: httpx.Response(401, text="bad key"))
    )
    with pytest.raises(HTTPStatusError) as exc_info:
        await client.prompt("q")

    assert exc_info.value.status_code == 401
    assert exc_info.value.payload == "bad key"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"choices": []}, completion(None)])
async def test_no_response(api_key, payload):
    client = ChatClient(
        api_key, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    )
    with pytest.raises(EmptyBodyError):
        await client.prompt("q")


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [b"not json", b'{"unexpected": true}'])
async def test_malformed_response(api_key, content):
    client = ChatClient(
        api_key, transport=httpx.MockTransport(lambda request: httpx.Response(200, content=content))
    )
    with pytest.raises(DecodeError):
        await client.prompt("q")


@pytest.mark.asyncio
async def test_module_chat_uses_settings(monkeypatch):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=completion("configured"))

    monkeypatch.setattr(llm, "settings", Settings(openai_api_key="sk-env", chat_model="gpt-4o"))
    reply = await llm.chat(
        "hi",
        previous=[ChatMessage(role="user", content="earlier")],
        transport=httpx.MockTransport(handler),
    )

    assert reply == "configured"
    assert seen[0].headers["authorization"] == "Bearer sk-env"
    body = json.loads(seen[0].content)
    assert body["model"] == "gpt-4o"
    assert [m["content"] for m in body["messages"]][1:] == ["earlier", "hi"]
