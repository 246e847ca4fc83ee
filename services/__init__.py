"""External service clients (speech-to-text, replies, text-to-speech, voice lab)."""

from .errors import (
    FieldOpsError,
    MicrophoneUnavailableError,
    PlaybackError,
    ServiceError,
    MissingCredentialsError,
    TranscriptionError,
    ReplyGenerationError,
    SynthesisError,
    VoiceLabError,
)

__all__ = [
    "FieldOpsError",
    "MicrophoneUnavailableError",
    "PlaybackError",
    "ServiceError",
    "MissingCredentialsError",
    "TranscriptionError",
    "ReplyGenerationError",
    "SynthesisError",
    "VoiceLabError",
]
