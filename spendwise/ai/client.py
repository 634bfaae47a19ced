"""Text-generation clients used by the insight generator."""

import logging
from typing import Optional, Protocol

from openai import OpenAI, OpenAIError

from spendwise.core.config import Settings
from spendwise.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

# Value shipped in .env.example; treated the same as no key.
PLACEHOLDER_API_KEY = "sk-your-openai-api-key-here"


class TextGenerationClient(Protocol):
    def complete(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        ...


class OpenAIChatClient:
    """Chat-completions client with a fixed time budget and no retries."""

    def __init__(self, api_key: str, model: str, timeout: float):
        self.model = model
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise ExternalServiceError(f"Text generation failed: {e}")

        if not completion.choices:
            raise ExternalServiceError("Text generation returned no choices")
        content = completion.choices[0].message.content
        if not content or not content.strip():
            raise ExternalServiceError("Text generation returned an empty message")
        return content.strip()


def build_text_client(settings: Settings) -> Optional[TextGenerationClient]:
    """OpenAI client when a real key is configured, otherwise None (fallback only)."""
    api_key = (settings.OPENAI_API_KEY or "").strip()
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        logger.info("OPENAI_API_KEY not configured, AI insights will use rule-based text")
        return None
    return OpenAIChatClient(api_key, settings.OPENAI_MODEL, settings.OPENAI_TIMEOUT_SECONDS)
