"""
AI gateway client routing chat completions to the configured provider

Providers:
- lovable: OpenAI-compatible AI gateway (default for admin tools)
- openai: OpenAI chat completions
- gemini: generateContent, converted to the OpenAI-compatible shape
- n8n: plain webhook, no tool support (default for visitor chat)
"""
import json
import time
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from pydantic import BaseModel

from folio.core.config import Settings, get_settings
from folio.core.errors import AIGatewayError
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import ai_request_duration_seconds, ai_requests_total

logger = LoggingConfig.get_logger(__name__)

PROVIDERS = ("lovable", "openai", "gemini", "n8n")

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
CREDITS_MESSAGE = "AI credits exhausted. Please add credits to continue."
SERVICE_ERROR_MESSAGE = "AI service error. Please try again."


class ProviderConfig(BaseModel):
    """Resolved provider selection for one call"""
    provider: str = "lovable"
    model: str
    webhook_url: Optional[str] = None


def resolve_chat_provider(module_config: Optional[Dict[str, Any]], settings: Optional[Settings] = None) -> ProviderConfig:
    """
    Provider for visitor chat: active_integration + integration.model.

    Without an ai module, or with an unknown integration, chat goes to the
    n8n webhook.
    """
    settings = settings or get_settings()
    config = module_config or {}
    integration = config.get("integration") or {}
    provider = config.get("active_integration") or "n8n"
    if provider not in PROVIDERS:
        provider = "n8n"
    return ProviderConfig(
        provider=provider,
        model=integration.get("model") or settings.chat_default_model,
        webhook_url=integration.get("webhook_url"),
    )


def resolve_admin_provider(module_config: Optional[Dict[str, Any]], settings: Optional[Settings] = None) -> ProviderConfig:
    """Provider for admin tools: admin_ai_provider + admin_ai_config.model (never n8n)"""
    settings = settings or get_settings()
    config = module_config or {}
    provider = config.get("admin_ai_provider") or "lovable"
    if provider not in ("lovable", "openai", "gemini"):
        provider = "lovable"
    admin_config = config.get("admin_ai_config") or {}
    return ProviderConfig(
        provider=provider,
        model=admin_config.get("model") or settings.admin_default_model,
    )


def map_upstream_error(status_code: int, provider: Optional[str] = None) -> AIGatewayError:
    """Map a non-2xx upstream status to the error surfaced to callers"""
    if status_code == 429:
        return AIGatewayError(RATE_LIMIT_MESSAGE, 429, provider)
    if status_code == 402:
        return AIGatewayError(CREDITS_MESSAGE, 402, provider)
    return AIGatewayError(SERVICE_ERROR_MESSAGE, 500, provider)


def extract_content(data: Dict[str, Any]) -> str:
    """Text of the first choice of an OpenAI-compatible response"""
    try:
        return data["choices"][0]["message"].get("content") or ""
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def extract_message(data: Dict[str, Any]) -> Dict[str, Any]:
    """Assistant message of the first choice (empty dict when absent)"""
    try:
        return data["choices"][0]["message"] or {}
    except (KeyError, IndexError, TypeError):
        return {}


class AIGateway:
    """
    Async client over OpenAI-compatible chat completions.

    A custom httpx transport may be injected (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.http_timeout_seconds,
            transport=self._transport,
        )

    def _endpoint(self, provider: str) -> tuple[str, str]:
        """URL and API key for an OpenAI-compatible provider"""
        if provider == "openai":
            key = self.settings.openai_api_key
            if not key:
                raise AIGatewayError(
                    "OPENAI_API_KEY is not configured. Add it to the environment for self-hosting.",
                    500, provider,
                )
            return self.settings.openai_url, key
        key = self.settings.lovable_api_key
        if not key:
            raise AIGatewayError("LOVABLE_API_KEY is not configured.", 500, "lovable")
        return self.settings.ai_gateway_url, key

    @staticmethod
    def _openai_body(
        model: str,
        messages: List[Dict[str, Any]],
        temperature: float,
        max_tokens: int,
        stream: bool,
        tools: Optional[List[Dict[str, Any]]],
        tool_choice: Optional[Any],
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }
        if tools:
            body["tools"] = tools
        if tool_choice:
            body["tool_choice"] = tool_choice
        return body

    @staticmethod
    def _gemini_body(messages: List[Dict[str, Any]], temperature: float, max_tokens: int) -> Dict[str, Any]:
        system = next((m for m in messages if m.get("role") == "system"), None)
        contents = [
            {
                "role": "model" if m.get("role") == "assistant" else "user",
                "parts": [{"text": m.get("content") or ""}],
            }
            for m in messages
            if m.get("role") != "system"
        ]
        body: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        if system:
            body["systemInstruction"] = {"parts": [{"text": system.get("content") or ""}]}
        return body

    async def complete(
        self,
        provider: ProviderConfig,
        messages: List[Dict[str, Any]],
        temperature: float = 0.7,
        max_tokens: int = 2000,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """
        Run one non-streaming completion.

        Returns an OpenAI-compatible response dict; for n8n the webhook's
        parsed JSON body is returned as-is.

        Raises:
            AIGatewayError: missing key (500) or mapped upstream failure
        """
        start = time.time()
        status = "success"
        try:
            if provider.provider == "n8n":
                return await self.call_webhook(
                    provider.webhook_url,
                    {"messages": messages, "temperature": temperature, "max_tokens": max_tokens},
                )
            if provider.provider == "gemini":
                return await self._complete_gemini(provider.model, messages, temperature, max_tokens)

            url, key = self._endpoint(provider.provider)
            body = self._openai_body(provider.model, messages, temperature, max_tokens, False, tools, tool_choice)
            async with self._client() as client:
                response = await client.post(
                    url,
                    json=body,
                    headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
                )
            if response.status_code >= 400:
                logger.error(
                    f"AI provider error: {response.status_code}",
                    extra={"provider": provider.provider, "body": response.text[:500]},
                )
                raise map_upstream_error(response.status_code, provider.provider)
            return response.json()
        except AIGatewayError:
            status = "error"
            raise
        except httpx.HTTPError as e:
            status = "error"
            logger.error(f"AI provider request failed: {e}", extra={"provider": provider.provider})
            raise AIGatewayError(SERVICE_ERROR_MESSAGE, 500, provider.provider) from e
        finally:
            ai_requests_total.labels(provider=provider.provider, model=provider.model, status=status).inc()
            ai_request_duration_seconds.labels(provider=provider.provider, model=provider.model).observe(
                time.time() - start
            )

    async def _complete_gemini(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: float,
        max_tokens: int,
    ) -> Dict[str, Any]:
        key = self.settings.gemini_api_key
        if not key:
            raise AIGatewayError(
                "GEMINI_API_KEY is not configured. Add it to the environment for self-hosting.",
                500, "gemini",
            )
        gemini_model = model or self.settings.gemini_default_model
        url = f"{self.settings.gemini_base_url}/models/{gemini_model}:generateContent"
        async with self._client() as client:
            response = await client.post(
                url,
                params={"key": key},
                json=self._gemini_body(messages, temperature, max_tokens),
            )
        if response.status_code >= 400:
            logger.error(f"AI provider error: {response.status_code}", extra={"provider": "gemini"})
            raise map_upstream_error(response.status_code, "gemini")

        data = response.json()
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"] or ""
        except (KeyError, IndexError, TypeError):
            text = ""
        return {
            "choices": [{
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }]
        }

    async def call_webhook(self, webhook_url: Optional[str], payload: Dict[str, Any]) -> Any:
        """POST JSON to an n8n-style webhook and return the parsed body"""
        if not webhook_url:
            raise AIGatewayError("n8n webhook URL is not configured. Set it in AI Module settings.", 500, "n8n")
        async with self._client() as client:
            response = await client.post(webhook_url, json=payload)
        if response.status_code >= 400:
            logger.error(f"Webhook error: {response.status_code}", extra={"provider": "n8n"})
            raise map_upstream_error(response.status_code, "n8n")
        text = response.text
        if not text.strip():
            return ""
        try:
            return response.json()
        except json.JSONDecodeError:
            return text

    async def stream_chat(
        self,
        provider: ProviderConfig,
        messages: List[Dict[str, Any]],
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> AsyncIterator[bytes]:
        """
        Open a streaming completion and return an iterator of raw SSE bytes.

        Errors are raised before the first byte so callers can still answer
        with a JSON error body.
        """
        if provider.provider == "gemini":
            data = await self._complete_gemini(provider.model, messages, temperature, max_tokens)
            return _single_event_stream(extract_content(data))

        url, key = self._endpoint(provider.provider)
        body = self._openai_body(provider.model, messages, temperature, max_tokens, True, None, None)
        client = self._client()
        request = client.build_request(
            "POST", url, json=body,
            headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise AIGatewayError(SERVICE_ERROR_MESSAGE, 500, provider.provider) from e

        ai_requests_total.labels(
            provider=provider.provider,
            model=provider.model,
            status="success" if response.status_code < 400 else "error",
        ).inc()

        if response.status_code >= 400:
            await response.aread()
            logger.error(f"AI provider error: {response.status_code}", extra={"provider": provider.provider})
            await response.aclose()
            await client.aclose()
            raise map_upstream_error(response.status_code, provider.provider)

        async def _relay() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_raw():
                    yield chunk
            finally:
                await response.aclose()
                await client.aclose()

        return _relay()


async def _single_event_stream(content: str) -> AsyncIterator[bytes]:
    """Wrap a complete answer as an OpenAI-style SSE stream"""
    chunk = {"choices": [{"delta": {"content": content}}]}
    yield f"data: {json.dumps(chunk)}\n\n".encode("utf-8")
    yield b"data: [DONE]\n\n"


def get_ai_gateway() -> AIGateway:
    """FastAPI dependency for the AI gateway"""
    return AIGateway()
