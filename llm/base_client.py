"""Completion client interface used by the reply step."""

import os
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel

from services.errors import MissingCredentialsError

logger = logging.getLogger(__name__)


class Message(BaseModel):
    """One chat message sent to the completion service."""
    role: Literal["system", "user", "assistant"]
    content: str


class LLMResponse(BaseModel):
    """Raw completion output; the ResponseParser interprets ``content``."""
    content: str
    usage: Optional[Dict[str, int]] = None
    finish_reason: Optional[str] = None

    @property
    def total_tokens(self) -> Optional[int]:
        return self.usage.get("total_tokens") if self.usage else None


def usage_dict(prompt_tokens: int, completion_tokens: int) -> Dict[str, int]:
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
    }


class BaseLLMClient(ABC):
    """
    Provider-neutral completion client.

    Subclasses set ``PROVIDER``, ``DEFAULT_MODEL`` and ``API_KEY_ENV``. A
    client built without a key still constructs; the first ``chat`` call
    raises MissingCredentialsError so the failure lands in the session
    that needed the reply.
    """

    PROVIDER = "base"
    DEFAULT_MODEL = ""
    API_KEY_ENV = ""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key or (os.environ.get(self.API_KEY_ENV) if self.API_KEY_ENV else None)
        self.model = model or self.DEFAULT_MODEL
        self.client = None

    def _require_client(self):
        if self.client is None:
            raise MissingCredentialsError(
                f"Missing {self.API_KEY_ENV}; {self.PROVIDER} client not initialized.",
                service="reply"
            )
        return self.client

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.4,
        max_tokens: int = 300,
        json_mode: bool = False
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: System prompt, prior turns and the transcript
            temperature: Sampling temperature (0-1)
            max_tokens: Maximum tokens in the reply
            json_mode: Ask the provider to constrain output to a JSON object

        Returns:
            LLMResponse with the raw completion text

        Raises:
            MissingCredentialsError: No API key configured
        """

    def get_provider_name(self) -> str:
        return self.PROVIDER

    def get_model_name(self) -> str:
        return self.model

    def describe(self) -> str:
        return f"{self.PROVIDER} ({self.model})"
