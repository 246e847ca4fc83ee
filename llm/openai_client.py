"""OpenAI-compatible completion clients (OpenAI and Groq)."""

import logging
from typing import Optional, List

from openai import OpenAI

from .base_client import BaseLLMClient, Message, LLMResponse, usage_dict

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """Chat completions over the OpenAI SDK."""

    PROVIDER = "openai"
    DEFAULT_MODEL = "gpt-4o-mini"
    API_KEY_ENV = "OPENAI_API_KEY"
    BASE_URL: Optional[str] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize client.

        Args:
            api_key: API key (falls back to the provider's env var)
            model: Model to use (default: DEFAULT_MODEL)
            base_url: Override API base URL
            timeout: Optional request timeout in seconds
        """
        super().__init__(api_key=api_key, model=model)
        self.base_url = base_url or self.BASE_URL

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=timeout)
            logger.info(f"Completion client ready: {self.describe()}")
        else:
            logger.warning(f"No {self.PROVIDER} API key provided")

    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.4,
        max_tokens: int = 300,
        json_mode: bool = False
    ) -> LLMResponse:
        client = self._require_client()

        kwargs = {
            "model": self.model,
            "messages": [msg.model_dump() for msg in messages],
            "temperature": temperature,
            "max_completion_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = client.chat.completions.create(**kwargs)
        except Exception as e:
            logger.error(f"{self.PROVIDER} completion failed: {e}")
            raise

        choice = response.choices[0]
        usage = None
        if response.usage:
            usage = usage_dict(response.usage.prompt_tokens, response.usage.completion_tokens)

        return LLMResponse(
            content=choice.message.content or "",
            usage=usage,
            finish_reason=choice.finish_reason
        )


class GroqClient(OpenAIClient):
    """Groq chat completions through its OpenAI-compatible endpoint."""

    PROVIDER = "groq"
    DEFAULT_MODEL = "llama-3.3-70b-versatile"
    API_KEY_ENV = "GROQ_API_KEY"
    BASE_URL = "https://api.groq.com/openai/v1"
