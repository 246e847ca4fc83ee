"""Service response schemas."""

import base64
from enum import Enum
from pydantic import BaseModel, Field


class SfxKind(str, Enum):
    """Sound effect accompanying a reply."""
    NONE = "none"
    ALERT = "alert"
    ALARM = "alarm"
    SIREN = "siren"


class AgentReply(BaseModel):
    """Reply text plus sound-effect classification."""
    reply_text: str
    sfx: SfxKind = SfxKind.NONE


class ParsePath(str, Enum):
    """Which decode tier produced a reply."""
    STRICT = "strict"
    FALLBACK = "fallback"


class ParsedReply(BaseModel):
    """Response parser output tagged with the decode path."""
    reply: AgentReply
    path: ParsePath
    status_line: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.path == ParsePath.FALLBACK


class TranscriptionResult(BaseModel):
    """Text returned by the transcription service."""
    text: str


class SynthesizedAudio(BaseModel):
    """Synthesized speech as base64 plus its media type."""
    audio_base64: str
    media_type: str = "audio/mpeg"

    @classmethod
    def from_bytes(cls, data: bytes, media_type: str = "audio/mpeg") -> "SynthesizedAudio":
        return cls(
            audio_base64=base64.b64encode(data).decode("ascii"),
            media_type=media_type
        )

    def decode(self) -> bytes:
        return base64.b64decode(self.audio_base64)


class ReplyPayload(BaseModel):
    """Response body of the composed reply-generation service."""
    reply: str
    sfx: SfxKind = SfxKind.NONE
    audio_base64: str
    media_type: str = Field("audio/mpeg")
