"""Text-to-speech via the ElevenLabs REST API."""

import os
import logging
from typing import Optional

import requests

from schemas.responses import SynthesizedAudio
from .errors import MissingCredentialsError, SynthesisError

logger = logging.getLogger(__name__)


def error_detail(response: requests.Response) -> str:
    """Best-effort error message from an ElevenLabs error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"status {response.status_code}"
    if isinstance(data, dict):
        detail = data.get("detail", data)
        if isinstance(detail, dict):
            return str(detail.get("message") or detail)
        return str(detail)
    return str(data)


class SpeechSynthesizer:
    """
    ElevenLabs text-to-speech client.

    Returns synthesized audio as base64 plus its media type.
    """

    DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"
    DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8Ikwvj"
    DEFAULT_MODEL = "eleven_turbo_v2_5"

    def __init__(
        self,
        api_key: Optional[str] = None,
        voice_id: Optional[str] = None,
        model_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        output_format: str = "mp3_44100_128"
    ):
        """
        Initialize synthesizer.

        Args:
            api_key: ElevenLabs API key (falls back to ELEVENLABS_API_KEY env var)
            voice_id: Voice to speak with
            model_id: TTS model
            base_url: API base URL
            timeout: Optional request timeout in seconds (None waits indefinitely)
            output_format: ElevenLabs output format
        """
        self.api_key = api_key or os.environ.get("ELEVENLABS_API_KEY")
        self.voice_id = voice_id or self.DEFAULT_VOICE_ID
        self.model_id = model_id or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.output_format = output_format

        if not self.api_key:
            logger.warning("No ElevenLabs API key provided; synthesis disabled")

    def _get_headers(self) -> dict:
        """Build request headers."""
        return {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

    def synthesize(self, text: str) -> SynthesizedAudio:
        """
        Synthesize speech for ``text``.

        Raises:
            MissingCredentialsError: No API key
            SynthesisError: Request failed or returned no audio
        """
        if not self.api_key:
            raise MissingCredentialsError(
                "Missing ELEVENLABS_API_KEY on the server.",
                service="synthesis"
            )
        if not text or not text.strip():
            raise SynthesisError("Nothing to synthesize")

        url = f"{self.base_url}/text-to-speech/{self.voice_id}"
        try:
            response = requests.post(
                url,
                params={"output_format": self.output_format},
                json={"text": text, "model_id": self.model_id},
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Synthesis request failed: {e}")
            raise SynthesisError(f"Synthesis request failed: {e}") from e

        if response.status_code != 200:
            detail = error_detail(response)
            logger.error(f"ElevenLabs returned status {response.status_code}: {detail}")
            raise SynthesisError(detail, status_code=response.status_code)

        if not response.content:
            raise SynthesisError("ElevenLabs returned no audio")

        media_type = response.headers.get("Content-Type", "audio/mpeg").split(";")[0].strip()
        logger.info(f"Synthesized {len(text)} chars -> {len(response.content)} bytes ({media_type})")
        return SynthesizedAudio.from_bytes(response.content, media_type=media_type or "audio/mpeg")
