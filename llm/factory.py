"""Completion client factory."""

import logging
from enum import Enum
from typing import Dict, Optional, Type, Union

from .base_client import BaseLLMClient
from .openai_client import OpenAIClient, GroqClient
from .anthropic_client import AnthropicClient

logger = logging.getLogger(__name__)


class LLMProvider(str, Enum):
    """Supported completion providers."""
    GROQ = "groq"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


CLIENTS: Dict[LLMProvider, Type[BaseLLMClient]] = {
    LLMProvider.GROQ: GroqClient,
    LLMProvider.OPENAI: OpenAIClient,
    LLMProvider.ANTHROPIC: AnthropicClient,
}


def create_llm_client(
    provider: Union[LLMProvider, str],
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    timeout: Optional[float] = None
) -> BaseLLMClient:
    """
    Build the completion client for the reply step.

    Args:
        provider: Provider enum or its name ("groq", "openai", "anthropic")
        api_key: API key for the provider
        model: Optional model override
        timeout: Optional request timeout in seconds

    Raises:
        ValueError: If provider is not supported
    """
    try:
        provider = LLMProvider(provider)
    except ValueError:
        raise ValueError(f"Unsupported LLM provider: {provider}") from None

    client = CLIENTS[provider](api_key=api_key, model=model, timeout=timeout)
    logger.debug(f"Created {client.describe()} client")
    return client
