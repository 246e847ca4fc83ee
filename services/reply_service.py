"""Composed reply generation: completion, parsing, then speech synthesis."""

import logging
from abc import ABC, abstractmethod

from agents.reply_agent import ReplyAgent
from schemas.context import ReplyRequest
from schemas.responses import ParsedReply, ReplyPayload, SynthesizedAudio
from .synthesis import SpeechSynthesizer

logger = logging.getLogger(__name__)


class ReplyService(ABC):
    """
    Reply-generation service.

    Callers may use the two steps separately (the recording controller does,
    so it can record the reply before synthesis) or call respond() for the
    composed result.
    """

    @abstractmethod
    def generate_reply(self, request: ReplyRequest) -> ParsedReply:
        """Produce the agent's reply and sound-effect cue."""
        pass

    @abstractmethod
    def synthesize(self, text: str) -> SynthesizedAudio:
        """Synthesize speech for ``text``."""
        pass

    def respond(self, request: ReplyRequest) -> ReplyPayload:
        """
        Run generation and synthesis in sequence.

        Returns:
            ReplyPayload with reply text, sfx, and base64 audio
        """
        parsed = self.generate_reply(request)
        audio = self.synthesize(parsed.reply.reply_text)
        return ReplyPayload(
            reply=parsed.reply.reply_text,
            sfx=parsed.reply.sfx,
            audio_base64=audio.audio_base64,
            media_type=audio.media_type
        )


class LiveReplyService(ReplyService):
    """Reply service backed by the LLM reply agent and ElevenLabs."""

    def __init__(self, agent: ReplyAgent, synthesizer: SpeechSynthesizer):
        self.agent = agent
        self.synthesizer = synthesizer

    def generate_reply(self, request: ReplyRequest) -> ParsedReply:
        return self.agent.generate(request)

    def synthesize(self, text: str) -> SynthesizedAudio:
        return self.synthesizer.synthesize(text)
