"""Speech-to-text through Groq's OpenAI-compatible Whisper endpoint."""

import os
import logging
from typing import Optional

import openai
from openai import OpenAI

from schemas.responses import TranscriptionResult
from .errors import MissingCredentialsError, TranscriptionError

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Whisper transcription client."""

    DEFAULT_MODEL = "whisper-large-v3-turbo"
    DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize transcription client.

        Args:
            api_key: Groq API key (falls back to GROQ_API_KEY env var)
            model: Whisper model (default: whisper-large-v3-turbo)
            base_url: OpenAI-compatible base URL (default: Groq)
            timeout: Optional request timeout in seconds
        """
        self.api_key = api_key or os.environ.get("GROQ_API_KEY")
        self.model = model or self.DEFAULT_MODEL
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.client = None

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=timeout)
            logger.info(f"Transcription client initialized with model: {self.model}")
        else:
            logger.warning("No Groq API key provided; transcription disabled")

    def transcribe(self, audio: bytes, filename: str = "speech.wav") -> TranscriptionResult:
        """
        Transcribe one encoded audio payload.

        Args:
            audio: Encoded audio (WAV from the microphone)
            filename: Upload name; its extension tells the service the format

        Returns:
            TranscriptionResult with non-empty text

        Raises:
            MissingCredentialsError: No API key
            TranscriptionError: Service error or empty transcription
        """
        if not self.client:
            raise MissingCredentialsError(
                "Missing GROQ_API_KEY on the server.",
                service="transcription"
            )
        if not audio:
            raise TranscriptionError("No audio captured")

        try:
            result = self.client.audio.transcriptions.create(
                file=(filename, audio),
                model=self.model
            )
        except openai.APIStatusError as e:
            logger.error(f"Transcription API error {e.status_code}: {e}")
            raise TranscriptionError(f"Transcription failed: {e.message}", status_code=e.status_code) from e
        except openai.OpenAIError as e:
            logger.error(f"Transcription request failed: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e

        text = (getattr(result, "text", None) or "").strip()
        if not text:
            raise TranscriptionError("Transcription failed")

        logger.info(f"Transcribed {len(audio)} bytes -> {len(text)} chars")
        return TranscriptionResult(text=text)
