"""Offline reply service used when demo mode is switched on."""

import json
import logging
from typing import Optional

from agents.response_parser import ResponseParser
from audio.capture import encode_wav
from audio.tones import sine_wave
from schemas.context import ReplyRequest
from schemas.responses import ParsedReply, SfxKind, SynthesizedAudio
from .reply_service import ReplyService

logger = logging.getLogger(__name__)

SAMPLE_REPLY = "Copy. Holding pattern. Returning latest telemetry and locking perimeter."


def make_beep(
    frequency: float = 440.0,
    duration: float = 0.25,
    sample_rate: int = 16000
) -> bytes:
    """Short mono WAV beep."""
    return encode_wav(sine_wave(frequency, duration, sample_rate=sample_rate), sample_rate)


class DemoReplyService(ReplyService):
    """Canned reply plus a beep; no network access."""

    def __init__(self, parser: Optional[ResponseParser] = None, reply_text: str = SAMPLE_REPLY):
        self.parser = parser or ResponseParser()
        self.reply_text = reply_text
        logger.info("Demo reply service active; upstream services will not be called")

    def generate_reply(self, request: ReplyRequest) -> ParsedReply:
        raw = json.dumps({"reply": self.reply_text, "sfx": SfxKind.NONE.value})
        return self.parser.parse(raw, request.context)

    def synthesize(self, text: str) -> SynthesizedAudio:
        return SynthesizedAudio.from_bytes(make_beep(), media_type="audio/wav")
