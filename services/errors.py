"""Error types shared by the voice pipeline and its service clients."""

from typing import Optional


class FieldOpsError(Exception):
    """Base class for console errors."""


class MicrophoneUnavailableError(FieldOpsError):
    """Microphone could not be opened (missing device or permission)."""


class PlaybackError(FieldOpsError):
    """Synthesized audio could not be decoded or played."""


class ServiceError(FieldOpsError):
    """An upstream service call failed."""

    def __init__(
        self,
        message: str,
        service: str = "service",
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class MissingCredentialsError(ServiceError):
    """No API key configured for a service."""


class TranscriptionError(ServiceError):
    """Speech-to-text failed or returned no text."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, service="transcription", status_code=status_code)


class ReplyGenerationError(ServiceError):
    """The completion service could not be reached or refused the call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, service="reply", status_code=status_code)


class SynthesisError(ServiceError):
    """Text-to-speech failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, service="synthesis", status_code=status_code)


class VoiceLabError(ServiceError):
    """Voice design or creation failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, service="voice_lab", status_code=status_code)
