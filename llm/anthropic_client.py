"""Anthropic completion client."""

import logging
from typing import Dict, List, Optional, Tuple

import anthropic

from .base_client import BaseLLMClient, Message, LLMResponse, usage_dict

logger = logging.getLogger(__name__)

# Anthropic has no JSON response format; the assistant turn is prefilled instead
JSON_PREFILL = "{"


def split_system(messages: List[Message]) -> Tuple[str, List[Dict[str, str]]]:
    """Pull system messages out into the separate ``system`` parameter."""
    system_parts = [msg.content for msg in messages if msg.role == "system"]
    turns = [msg.model_dump() for msg in messages if msg.role != "system"]
    return "\n".join(system_parts).strip(), turns


class AnthropicClient(BaseLLMClient):
    """Claude messages API."""

    PROVIDER = "anthropic"
    DEFAULT_MODEL = "claude-3-5-haiku-latest"
    API_KEY_ENV = "ANTHROPIC_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        super().__init__(api_key=api_key, model=model)

        if self.api_key:
            kwargs = {"api_key": self.api_key}
            if timeout is not None:
                kwargs["timeout"] = timeout
            self.client = anthropic.Anthropic(**kwargs)
            logger.info(f"Completion client ready: {self.describe()}")
        else:
            logger.warning("No Anthropic API key provided")

    def chat(
        self,
        messages: List[Message],
        temperature: float = 0.4,
        max_tokens: int = 300,
        json_mode: bool = False
    ) -> LLMResponse:
        client = self._require_client()

        system, turns = split_system(messages)
        if json_mode:
            turns.append({"role": "assistant", "content": JSON_PREFILL})

        kwargs = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": turns,
        }
        if system:
            kwargs["system"] = system

        try:
            response = client.messages.create(**kwargs)
        except Exception as e:
            logger.error(f"anthropic completion failed: {e}")
            raise

        content = "".join(block.text for block in response.content if block.type == "text")
        if json_mode:
            content = JSON_PREFILL + content

        usage = None
        if response.usage:
            usage = usage_dict(response.usage.input_tokens, response.usage.output_tokens)

        return LLMResponse(content=content, usage=usage, finish_reason=response.stop_reason)
