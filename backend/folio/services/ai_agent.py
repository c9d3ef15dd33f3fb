"""
Chat agent: builds context, calls the provider and handles tool calls
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from folio.core.ai_gateway import (AIGateway, ProviderConfig, extract_content,
                                   extract_message)
from folio.core.config import get_settings
from folio.core.errors import AIGatewayError
from folio.core.logging_config import LoggingConfig
from folio.core.metrics import ai_tool_calls_total
from folio.services.ai_context import build_dynamic_prompt, load_resume_context
from folio.services.ai_tools import (Artifact, get_active_tools,
                                     get_tool_instructions, parse_tool_call)

logger = LoggingConfig.get_logger(__name__)

ARTIFACT_FALLBACK_OUTPUT = "Here's what I found:"
NO_RESPONSE_OUTPUT = "No response from AI."


class AgentRequest(BaseModel):
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    session_id: Optional[str] = None
    system_prompt: str = ""
    site_context: Optional[Dict[str, Any]] = None
    enabled_tools: Optional[List[str]] = None
    provider: ProviderConfig


class AgentResult(BaseModel):
    output: str
    artifacts: List[Artifact] = Field(default_factory=list)


def parse_agent_webhook_reply(data: Any) -> str:
    """Text from an external agent webhook (list, dict or string bodies)"""
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, dict):
            return first.get("output") or first.get("message") or json.dumps(first)
        return first if isinstance(first, str) else json.dumps(first)
    if isinstance(data, dict):
        return data.get("output") or data.get("message") or json.dumps(data)
    if isinstance(data, str):
        return data
    return json.dumps(data)


class AIAgent:
    """
    Runs one chat turn against the configured provider.

    For tool-capable providers the model may request tools; each tool call
    becomes an artifact and the model is called again, up to
    agent_max_tool_iterations calls in total.
    """

    def __init__(self, gateway: AIGateway, db: Optional[Session] = None, max_iterations: Optional[int] = None):
        self.gateway = gateway
        self.db = db
        self.max_iterations = max_iterations or get_settings().agent_max_tool_iterations

    async def run(self, request: AgentRequest) -> AgentResult:
        provider = request.provider
        logger.info(
            f"Agent run: provider={provider.provider}, model={provider.model}",
            extra={"session_id": request.session_id, "messages": len(request.messages)}
        )

        if provider.provider == "n8n":
            return await self._run_webhook(request)

        full_prompt = build_dynamic_prompt(request.system_prompt, request.site_context)

        if provider.provider == "gemini":
            data = await self.gateway.complete(
                provider,
                [{"role": "system", "content": full_prompt}, *request.messages],
            )
            return AgentResult(output=extract_content(data) or "No response from Gemini.")

        resume = load_resume_context(self.db) if self.db is not None else None
        tools: List[Dict[str, Any]] = []
        if resume:
            full_prompt += f"\n\n## Complete Profile\n{resume}"
            full_prompt += get_tool_instructions(request.enabled_tools)
            tools = get_active_tools(request.enabled_tools)

        return await self._run_tool_loop(provider, full_prompt, request.messages, tools)

    async def _run_webhook(self, request: AgentRequest) -> AgentResult:
        if not request.provider.webhook_url:
            raise AIGatewayError("n8n webhook URL is required", 500, "n8n")
        payload: Dict[str, Any] = {
            "messages": request.messages,
            "sessionId": request.session_id or "default",
            "systemPrompt": build_dynamic_prompt(request.system_prompt, request.site_context),
        }
        if request.site_context:
            payload["siteContext"] = request.site_context
        data = await self.gateway.call_webhook(request.provider.webhook_url, payload)
        return AgentResult(output=parse_agent_webhook_reply(data))

    async def _run_tool_loop(
        self,
        provider: ProviderConfig,
        system_prompt: str,
        messages: List[Dict[str, Any]],
        tools: List[Dict[str, Any]],
    ) -> AgentResult:
        conversation: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}, *messages]
        artifacts: List[Artifact] = []
        last_text = ""

        for iteration in range(1, self.max_iterations + 1):
            data = await self.gateway.complete(
                provider,
                conversation,
                tools=tools or None,
                tool_choice="auto" if tools else None,
            )
            message = extract_message(data)
            last_text = message.get("content") or last_text
            tool_calls = message.get("tool_calls") or []

            if not tool_calls:
                break

            conversation.append({
                "role": "assistant",
                "content": message.get("content") or "",
                "tool_calls": tool_calls,
            })
            for tool_call in tool_calls:
                name = (tool_call.get("function") or {}).get("name") or "unknown"
                ai_tool_calls_total.labels(tool=name).inc()
                artifact = parse_tool_call(tool_call)
                if artifact is not None:
                    artifacts.append(artifact)
                conversation.append({
                    "role": "tool",
                    "tool_call_id": tool_call.get("id") or name,
                    "content": json.dumps(
                        {"status": "rendered", "artifact": artifact.type} if artifact
                        else {"status": "error", "message": "Invalid tool arguments"}
                    ),
                })
            logger.info(f"Tool iteration {iteration}: {len(tool_calls)} call(s), {len(artifacts)} artifact(s)")
        else:
            logger.warning(f"Agent stopped after {self.max_iterations} tool iteration(s)")

        if not last_text:
            last_text = ARTIFACT_FALLBACK_OUTPUT if artifacts else NO_RESPONSE_OUTPUT
        return AgentResult(output=last_text, artifacts=artifacts)
