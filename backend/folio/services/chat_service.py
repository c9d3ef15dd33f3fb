"""
Chat widget logic: webhook reply parsing and conversation state
"""
import json
import random
import re
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from folio.core.config import get_settings
from folio.core.errors import FolioError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

DEFAULT_REPLY = "I'm sorry, I couldn't process that request."

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_BASE36 = string.digits + string.ascii_lowercase


def parse_webhook_response(data: Any) -> Any:
    """
    Extract the reply from a loosely-typed webhook body.

    Accepts [ {output|message} ], {output|message} or a bare string.
    A list whose first element has neither key yields that element itself.
    """
    if isinstance(data, list) and data:
        first = data[0]
        if isinstance(first, dict):
            return first.get("output") or first.get("message") or first
        return first
    if isinstance(data, dict):
        if data.get("output"):
            return data["output"]
        if data.get("message"):
            return data["message"]
        return DEFAULT_REPLY
    if isinstance(data, str) and data:
        return data
    return DEFAULT_REPLY


def clean_webhook_response(text: Any) -> str:
    """Strip control characters, normalize line breaks and trim lines"""
    if not text or not isinstance(text, str):
        return ""
    text = _CONTROL_CHARS.sub("", text.strip())
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def normalize_text(text: str) -> str:
    return " ".join(text.split()).lower()


def generate_session_id() -> str:
    """session_<epoch-ms>_<9 random base36 chars>"""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


@dataclass
class ChatMessage:
    text: str
    is_user: bool
    id: str = field(default_factory=lambda: str(int(time.time() * 1000)))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "isUser": self.is_user}


@dataclass
class ChatConversation:
    """Messages of one chat session"""
    messages: List[ChatMessage] = field(default_factory=list)
    session_id: str = field(default_factory=generate_session_id)

    def add_user_message(self, text: str) -> ChatMessage:
        """Append a user message unless it repeats the last user message"""
        if self.messages:
            last = self.messages[-1]
            if last.is_user and normalize_text(last.text) == normalize_text(text):
                return last
        message = ChatMessage(text=text, is_user=True)
        self.messages.append(message)
        return message

    def add_bot_message(self, text: str) -> ChatMessage:
        message = ChatMessage(text=text, is_user=False)
        self.messages.append(message)
        return message

    def reset(self) -> None:
        self.messages = []
        self.session_id = generate_session_id()


class ChatError(Exception):
    """Failure talking to the chat backend; message is shown to the visitor"""


class ChatWidgetService:
    """
    Sends visitor messages to the chat webhook (n8n) or the AI agent.

    `agent` is an AIAgent-like object with `run(AgentRequest)`; it is used
    whenever the integration is not n8n.
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        integration: str = "n8n",
        agent=None,
        agent_provider=None,
        site_context: Optional[Dict[str, Any]] = None,
        system_prompt: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.integration = integration or "n8n"
        self.agent = agent
        self.agent_provider = agent_provider
        self.site_context = site_context
        self.system_prompt = system_prompt
        self._transport = transport

    async def send(self, conversation: ChatConversation, text: str) -> Optional[str]:
        """
        Send one message and append the reply to the conversation.

        Returns:
            None on success, otherwise the error message (also added to the
            conversation as a bot message)
        """
        if not text.strip():
            return None

        conversation.add_user_message(text)
        try:
            if self.integration != "n8n":
                reply = await self._send_to_agent(conversation)
            else:
                reply = await self._send_to_webhook(conversation.session_id, text)
            conversation.add_bot_message(reply)
            return None
        except (ChatError, FolioError, httpx.HTTPError) as e:
            error_message = str(e) or "Unknown error occurred"
            logger.warning(f"Chat send failed: {error_message}", extra={"session_id": conversation.session_id})
            conversation.add_bot_message(f"Error: {error_message.rstrip('.')}. Please check the webhook configuration.")
            return error_message

    async def _send_to_agent(self, conversation: ChatConversation) -> str:
        from folio.services.ai_agent import AgentRequest

        if self.agent is None or self.agent_provider is None:
            raise ChatError("AI agent is not configured")
        history = [
            {"role": "user" if m.is_user else "assistant", "content": m.text}
            for m in conversation.messages
        ]
        result = await self.agent.run(AgentRequest(
            messages=history,
            session_id=conversation.session_id,
            system_prompt=self.system_prompt,
            site_context=self.site_context,
            provider=self.agent_provider,
        ))
        return clean_webhook_response(result.output or "No response")

    def _has_site_context(self) -> bool:
        context = self.site_context or {}
        return bool(context.get("pages") or context.get("blogs"))

    async def _send_to_webhook(self, session_id: str, text: str) -> str:
        if not self.webhook_url:
            raise ChatError("Webhook URL is not configured")

        body: Dict[str, Any] = {"message": text, "sessionId": session_id}
        if self._has_site_context():
            body["siteContext"] = self.site_context

        async with httpx.AsyncClient(
            timeout=get_settings().http_timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(self.webhook_url, json=body)

        if response.status_code >= 400:
            raise ChatError(f"HTTP {response.status_code}: {response.text or 'Failed to send message'}")

        response_text = response.text
        if not response_text or not response_text.strip():
            raise ChatError("Empty response from server")
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError:
            raise ChatError("Invalid JSON response from server")

        return clean_webhook_response(parse_webhook_response(data))
