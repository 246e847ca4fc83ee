"""LLM-backed reply agent for the GBird persona."""

import json
import logging
from typing import List, Optional

from llm.base_client import BaseLLMClient, Message
from schemas.context import ReplyRequest
from schemas.responses import ParsedReply
from services.errors import ReplyGenerationError, ServiceError
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)


class ReplyAgent:
    """
    Generates the agent's spoken reply and sound-effect cue.

    The completion output is handed to the ResponseParser; only a failure
    to reach the completion service is raised.
    """

    SYSTEM_PROMPT = """You are GBird, a field-operations drone answering its operator over a voice link.

## Style
- Radio brevity: one to three short sentences, no lists, no markdown.
- Speak in first person as the drone. Never invent sensor readings that are not in the context.
- Acknowledge commands, report what you are doing, flag risks.

## Sound effects
Pick one cue for the console to play with your reply:
- "none": routine traffic
- "alert": something worth noticing (target tagged, waypoint reached)
- "alarm": a hazard (low battery, signal loss, obstacle)
- "siren": an emergency requiring immediate operator action

## Response Format
Respond with valid JSON only:
{"reply": "<what you say>", "sfx": "none" | "alert" | "alarm" | "siren"}"""

    def __init__(
        self,
        llm_client: BaseLLMClient,
        parser: Optional[ResponseParser] = None,
        temperature: float = 0.4,
        max_tokens: int = 300
    ):
        """
        Initialize reply agent.

        Args:
            llm_client: Completion client
            parser: Reply parser (default: ResponseParser())
            temperature: Sampling temperature
            max_tokens: Completion token cap
        """
        self.llm_client = llm_client
        self.parser = parser or ResponseParser()
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(self, request: ReplyRequest) -> List[Message]:
        """System prompt with live context, prior turns, then the transcript."""
        system = self.SYSTEM_PROMPT
        if request.context is not None:
            system += "\n\n## Current context\n" + json.dumps(request.context.to_payload())

        messages = [Message(role="system", content=system)]

        history = list(request.history)
        # The transcript is usually already the newest user turn in memory
        if history and history[-1].role == "user" and history[-1].content == request.transcript:
            history = history[:-1]
        for item in history:
            messages.append(Message(role=item.role, content=item.content))

        messages.append(Message(role="user", content=request.transcript))
        return messages

    def generate(self, request: ReplyRequest) -> ParsedReply:
        """
        Produce a parsed reply for the request.

        Raises:
            ReplyGenerationError: The completion service could not be reached
            MissingCredentialsError: No API key configured
        """
        messages = self.build_messages(request)

        try:
            response = self.llm_client.chat(
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True
            )
        except ServiceError:
            raise
        except Exception as e:
            logger.error(f"Reply generation failed: {e}")
            raise ReplyGenerationError(f"Reply generation failed: {e}") from e

        parsed = self.parser.parse(response.content, request.context)
        logger.info(
            f"Reply generated via {self.llm_client.get_provider_name()} "
            f"(path={parsed.path.value}, sfx={parsed.reply.sfx.value})"
        )
        return parsed
