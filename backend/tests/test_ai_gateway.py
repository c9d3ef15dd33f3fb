"""
Tests for AIGateway provider routing and error mapping
"""
import json

import httpx
import pytest

from folio.core.ai_gateway import (CREDITS_MESSAGE, RATE_LIMIT_MESSAGE,
                                   SERVICE_ERROR_MESSAGE, AIGateway,
                                   ProviderConfig, extract_content,
                                   map_upstream_error, resolve_admin_provider,
                                   resolve_chat_provider)
from folio.core.config import Settings
from folio.core.errors import AIGatewayError


def _completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def test_map_upstream_error():
    assert map_upstream_error(429).status_code == 429
    assert map_upstream_error(429).message == RATE_LIMIT_MESSAGE
    assert map_upstream_error(402).message == CREDITS_MESSAGE
    error = map_upstream_error(503)
    assert (error.status_code, error.message) == (500, SERVICE_ERROR_MESSAGE)


def test_resolve_providers(test_settings):
    chat = resolve_chat_provider({"active_integration": "openai", "integration": {"model": "gpt-4o"}}, test_settings)
    assert (chat.provider, chat.model) == ("openai", "gpt-4o")

    fallback = resolve_chat_provider({"active_integration": "bogus"}, test_settings)
    assert fallback.provider == "n8n"
    assert fallback.model == test_settings.chat_default_model

    assert resolve_chat_provider(None, test_settings).provider == "n8n"
    assert resolve_chat_provider({"active_integration": "lovable"}, test_settings).provider == "lovable"

    admin = resolve_admin_provider({"admin_ai_provider": "n8n"}, test_settings)
    assert admin.provider == "lovable"
    assert admin.model == test_settings.admin_default_model


def test_extract_content_tolerates_bad_shapes():
    assert extract_content(_completion("hi")) == "hi"
    assert extract_content({}) == ""
    assert extract_content({"choices": []}) == ""


@pytest.mark.asyncio
async def test_complete_sends_bearer_and_openai_body(test_settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion("hello"))

    gateway = AIGateway(test_settings, transport=httpx.MockTransport(handler))
    tools = [{"type": "function", "function": {"name": "x"}}]
    data = await gateway.complete(
        ProviderConfig(provider="lovable", model="m1"),
        [{"role": "user", "content": "hi"}],
        tools=tools,
    )

    assert extract_content(data) == "hello"
    assert seen["url"] == test_settings.ai_gateway_url
    assert seen["auth"] == "Bearer test-lovable-key"
    assert seen["body"]["model"] == "m1"
    assert seen["body"]["stream"] is False
    assert seen["body"]["tools"] == tools
    assert "tool_choice" not in seen["body"]


@pytest.mark.asyncio
async def test_complete_maps_rate_limit(test_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(429, json={"error": "slow down"}))
    gateway = AIGateway(test_settings, transport=transport)
    with pytest.raises(AIGatewayError) as exc:
        await gateway.complete(ProviderConfig(provider="openai", model="gpt"), [])
    assert exc.value.status_code == 429
    assert exc.value.message == RATE_LIMIT_MESSAGE


@pytest.mark.asyncio
async def test_complete_missing_key():
    settings = Settings(openai_api_key=None)
    with pytest.raises(AIGatewayError) as exc:
        await AIGateway(settings).complete(ProviderConfig(provider="openai", model="gpt"), [])
    assert exc.value.status_code == 500
    assert "OPENAI_API_KEY" in exc.value.message


@pytest.mark.asyncio
async def test_network_error_is_service_error(test_settings):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    gateway = AIGateway(test_settings, transport=httpx.MockTransport(handler))
    with pytest.raises(AIGatewayError) as exc:
        await gateway.complete(ProviderConfig(provider="lovable", model="m"), [])
    assert exc.value.message == SERVICE_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_gemini_conversion(test_settings):
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "bonjour"}]}}]})

    gateway = AIGateway(test_settings, transport=httpx.MockTransport(handler))
    data = await gateway.complete(
        ProviderConfig(provider="gemini", model="gemini-1.5-flash"),
        [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ],
    )

    assert extract_content(data) == "bonjour"
    assert seen["url"].path.endswith("/models/gemini-1.5-flash:generateContent")
    assert seen["url"].params["key"] == "test-gemini-key"
    assert seen["body"]["systemInstruction"] == {"parts": [{"text": "be nice"}]}
    assert [c["role"] for c in seen["body"]["contents"]] == ["user", "model"]


@pytest.mark.asyncio
async def test_gemini_missing_candidates_gives_empty_text(test_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    data = await AIGateway(test_settings, transport=transport).complete(
        ProviderConfig(provider="gemini", model="g"), [{"role": "user", "content": "hi"}]
    )
    assert extract_content(data) == ""


@pytest.mark.asyncio
async def test_webhook_body_variants(test_settings):
    bodies = iter(["", '{"output": "x"}', "plain text"])
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=next(bodies)))
    gateway = AIGateway(test_settings, transport=transport)

    assert await gateway.call_webhook("https://hooks.example/n8n", {}) == ""
    assert await gateway.call_webhook("https://hooks.example/n8n", {}) == {"output": "x"}
    assert await gateway.call_webhook("https://hooks.example/n8n", {}) == "plain text"


@pytest.mark.asyncio
async def test_webhook_requires_url(test_settings):
    with pytest.raises(AIGatewayError, match="webhook URL is not configured"):
        await AIGateway(test_settings).call_webhook(None, {})


@pytest.mark.asyncio
async def test_stream_relays_sse_bytes(test_settings):
    sse = b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n\ndata: [DONE]\n\n'
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=sse))
    stream = await AIGateway(test_settings, transport=transport).stream_chat(
        ProviderConfig(provider="lovable", model="m"), [{"role": "user", "content": "hi"}]
    )
    received = b"".join([chunk async for chunk in stream])
    assert received == sse


@pytest.mark.asyncio
async def test_stream_error_raised_before_first_byte(test_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(402, json={}))
    with pytest.raises(AIGatewayError) as exc:
        await AIGateway(test_settings, transport=transport).stream_chat(
            ProviderConfig(provider="lovable", model="m"), []
        )
    assert exc.value.status_code == 402


@pytest.mark.asyncio
async def test_gemini_stream_is_single_event(test_settings):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "yo"}]}}]})
    )
    stream = await AIGateway(test_settings, transport=transport).stream_chat(
        ProviderConfig(provider="gemini", model="g"), []
    )
    chunks = [chunk async for chunk in stream]
    assert chunks[-1] == b"data: [DONE]\n\n"
    assert b'"yo"' in chunks[0]
