"""
Text and system-prompt rewriting through the AI gateway
"""
from typing import Any, Dict, Optional

from folio.core.ai_gateway import (AIGateway, ProviderConfig, extract_content,
                                   resolve_admin_provider)
from folio.core.config import get_settings
from folio.core.errors import AIGatewayError, ValidationError
from folio.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

TEXT_ACTIONS = ("correct", "enhance", "expand")
PROMPT_ACTIONS = ("enhance-prompt", "expand-prompt", "structure-prompt")

_TEXT_PROMPTS = {
    "correct": (
        "You are a helpful writing assistant. Your task is to correct spelling, grammar, and punctuation "
        "errors in the provided text. Keep the same tone and meaning, only fix errors. Return ONLY the "
        "corrected text without any explanations or additional commentary."
    ),
    "enhance": (
        "You are a professional copywriter. Your task is to improve the provided text to make it more "
        "engaging, professional, and impactful. Maintain the core message but improve word choice, flow, "
        "and clarity. Keep approximately the same length. Return ONLY the enhanced text without any "
        "explanations or additional commentary."
    ),
    "expand": (
        "You are a professional copywriter. Your task is to expand the provided text with more details, "
        "examples, or elaboration. Make it roughly 2-3 times longer while maintaining the same professional "
        "tone. Return ONLY the expanded text without any explanations or additional commentary."
    ),
}

_PROMPT_BASE = (
    "You are an expert at crafting AI system prompts for chatbots and virtual assistants. "
    "Your task is to improve the user's system prompt to make it more effective."
)

_PROMPT_TASKS = {
    "enhance-prompt": """Your task is to IMPROVE the provided system prompt:
- Make instructions clearer and more specific
- Improve the language and tone
- Remove redundancy
- Keep the same length approximately
- Preserve the original intent and personality

Return ONLY the improved prompt text, no explanations or meta-commentary.""",
    "expand-prompt": """Your task is to EXPAND the provided system prompt with more detail:
- Add specific examples of desired behavior
- Include edge case handling
- Add personality traits and conversational style details
- Include formatting guidelines if appropriate
- Make it 2-3x longer while staying focused

Return ONLY the expanded prompt text, no explanations or meta-commentary.""",
    "structure-prompt": """Your task is to STRUCTURE the provided system prompt with clear organization:
- Use markdown headings (# Role, ## Personality, ## Instructions, etc.)
- Organize into logical sections
- Use bullet points for lists
- Add clear separation between different aspects
- Keep all original content but reorganize it

Return ONLY the structured prompt text, no explanations or meta-commentary.""",
}


def text_system_prompt(action: str, context: Optional[str] = None) -> str:
    prompt = _TEXT_PROMPTS.get(action, "You are a helpful assistant.")
    if context:
        prompt += f"\n\nContext: This is a {context} for a project portfolio website."
    return prompt


def prompt_system_prompt(action: str) -> str:
    task = _PROMPT_TASKS.get(action)
    return f"{_PROMPT_BASE}\n\n{task}" if task else _PROMPT_BASE


class TextEnhancer:
    """Rewrites user-supplied copy or system prompts"""

    def __init__(self, gateway: AIGateway):
        self.gateway = gateway

    async def enhance_text(self, text: Optional[str], action: Optional[str], context: Optional[str] = None) -> Dict[str, Any]:
        """
        Correct, enhance or expand a piece of copy.

        Raises:
            ValidationError: missing fields or unknown action
            AIGatewayError: provider failure or empty answer
        """
        if not text or not action:
            raise ValidationError("Missing required fields: text and action")
        if action not in TEXT_ACTIONS:
            raise ValidationError("Invalid action. Must be: correct, enhance, or expand")

        logger.info(f"Processing {action} request for text: \"{text[:50]}...\"")
        provider = ProviderConfig(provider="lovable", model=get_settings().chat_default_model)
        data = await self.gateway.complete(
            provider,
            [
                {"role": "system", "content": text_system_prompt(action, context)},
                {"role": "user", "content": text},
            ],
            temperature=0.1 if action == "correct" else 0.7,
            max_tokens=2000 if action == "expand" else 1000,
        )
        return {"text": self._require_text(data), "action": action}

    async def enhance_prompt(
        self,
        text: Optional[str],
        action: Optional[str],
        ai_config: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Improve a chatbot system prompt using the admin AI provider"""
        if not text or not text.strip():
            raise ValidationError("No prompt text provided")
        if action not in PROMPT_ACTIONS:
            raise ValidationError("Invalid action")

        logger.info(f"Processing {action} request")
        data = await self.gateway.complete(
            resolve_admin_provider(ai_config),
            [
                {"role": "system", "content": prompt_system_prompt(action)},
                {"role": "user", "content": text},
            ],
            temperature=0.7,
            max_tokens=3000 if action == "expand-prompt" else 2000,
        )
        return {"text": self._require_text(data), "action": action}

    @staticmethod
    def _require_text(data: Dict[str, Any]) -> str:
        result = extract_content(data).strip()
        if not result:
            raise AIGatewayError("No response from AI service", 500)
        return result
