"""ElevenLabs voice design and creation with a local history of saved voices."""

import os
import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from memory.persistence import SnapshotStore
from schemas.voice import SavedVoice, VoicePreset, VoicePreview
from .errors import MissingCredentialsError, VoiceLabError
from .synthesis import error_detail

logger = logging.getLogger(__name__)

BLOCKED_TERMS = [
    "chicano",
    "mexican",
    "latino",
    "latina",
    "hispanic",
    "mexicali",
    "cholo",
    "gangster",
]

NEUTRAL_TRAITS_MESSAGE = "Please describe the voice using neutral traits (pitch, pace, energy, clarity)."

DEFAULT_TEXT = (
    "Control room check. Airspace remains stable and visibility is clear. Maintain altitude "
    "at seven point eight thousand feet, hold perimeter scan, and report any anomaly within "
    "sector five. Keep comms crisp and steady."
)

PRESETS = [
    VoicePreset(
        name="Warm & Confident",
        description=(
            "Warm, confident baritone with relaxed cadence, clear diction, and subtle grit. "
            "Medium pace, steady energy, professional and reassuring."
        ),
        text=DEFAULT_TEXT,
    ),
    VoicePreset(
        name="Bright & Quick",
        description=(
            "Bright tenor with crisp diction, upbeat energy, and fast but controlled pace. "
            "Friendly and concise, great for alerts."
        ),
        text=(
            "Heads up team: quick sweep complete. No anomalies in sectors one through four. "
            "Holding pattern and awaiting next directive. Keep channels clear for immediate updates."
        ),
    ),
    VoicePreset(
        name="Calm Bilingual",
        description=(
            "Neutral mid-low pitch, calm and steady, clear consonants, gentle warmth. "
            "Comfortable switching between English and Spanish."
        ),
        text=(
            "Control update: airspace is stable, alt set at seven point eight thousand. "
            "Mantén vigilancia en el perímetro y reporta cualquier cambio de inmediato. "
            "Comms must stay clean and calm."
        ),
    ),
]


def get_preset(name: str) -> Optional[VoicePreset]:
    """Look up a preset by name."""
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return None


def has_blocked_term(text: str) -> bool:
    normalized = text.lower()
    return any(term in normalized for term in BLOCKED_TERMS)


def validate_design(description: str, text: Optional[str] = None):
    """
    Check a design request before it is sent.

    Raises:
        ValueError: With a user-facing message
    """
    if not description or len(description.strip()) < 20:
        raise ValueError("voice_description must be at least 20 characters.")
    if len(description) > 1000:
        raise ValueError("voice_description must be 1000 characters or fewer.")
    if has_blocked_term(description):
        raise ValueError(NEUTRAL_TRAITS_MESSAGE)
    if text and (len(text) < 100 or len(text) > 1000):
        raise ValueError("text must be between 100 and 1000 characters when provided.")


def query_params(**values: Any) -> Optional[Dict[str, str]]:
    """Query string for the set values; booleans as ``true``/``false``."""
    params = {}
    for name, value in values.items():
        if value is None:
            continue
        params[name] = str(value).lower() if isinstance(value, bool) else str(value)
    return params or None


class VoiceLab:
    """
    Designs voice previews and saves chosen previews as voices.

    History keeps the 10 most recent saved voices, newest first, in the
    snapshot store under ``voice-history``.
    """

    DEFAULT_BASE_URL = "https://api.elevenlabs.io/v1"
    DEFAULT_MODEL = "eleven_ttv_v3"
    HISTORY_KEY = "voice-history"
    HISTORY_LIMIT = 10

    def __init__(
        self,
        snapshots: SnapshotStore,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize voice lab.

        Args:
            snapshots: Persistence port for the saved-voice history
            api_key: ElevenLabs API key (falls back to ELEVENLABS_API_KEY env var)
            base_url: API base URL
            timeout: Optional request timeout in seconds
        """
        self.snapshots = snapshots
        self.api_key = api_key or os.environ.get("ELEVENLABS_API_KEY")
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.history: List[SavedVoice] = self._load_history()

    def _get_headers(self) -> dict:
        return {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _post(self, path: str, payload: dict, params: Optional[dict] = None) -> dict:
        if not self.api_key:
            raise MissingCredentialsError(
                "Missing ELEVENLABS_API_KEY on the server.",
                service="voice_lab"
            )

        url = f"{self.base_url}{path}"
        try:
            response = requests.post(
                url,
                params=params,
                json=payload,
                headers=self._get_headers(),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Voice lab request to {path} failed: {e}")
            raise VoiceLabError(f"ElevenLabs request failed: {e}") from e

        if response.status_code != 200:
            detail = error_detail(response)
            logger.error(f"ElevenLabs {path} returned status {response.status_code}: {detail}")
            raise VoiceLabError(detail, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise VoiceLabError("ElevenLabs returned an unreadable response.") from e

    def design(
        self,
        description: str,
        text: Optional[str] = None,
        model_id: str = DEFAULT_MODEL,
        output_format: Optional[str] = None,
        auto_generate_text: Optional[bool] = None,
        seed: Optional[int] = None,
        guidance_scale: Optional[float] = None,
        loudness: Optional[float] = None,
        quality: Optional[float] = None,
        stream_previews: Optional[bool] = None
    ) -> List[VoicePreview]:
        """
        Generate voice previews from a description.

        Args:
            description: Voice description (20-1000 chars, neutral traits)
            text: Optional sample text to speak (100-1000 chars)
            model_id: Voice design model
            output_format: Optional ElevenLabs output format
            auto_generate_text, seed, guidance_scale, loudness, quality,
            stream_previews: Optional generation controls, sent as query
                parameters only when set

        Returns:
            Non-empty list of previews

        Raises:
            ValueError: Invalid description or text
            VoiceLabError: Request failed or returned no previews
        """
        validate_design(description, text)

        payload = {"voice_description": description, "model_id": model_id}
        if text:
            payload["text"] = text
        params = query_params(
            output_format=output_format or None,
            auto_generate_text=auto_generate_text,
            seed=seed,
            guidance_scale=guidance_scale,
            loudness=loudness,
            quality=quality,
            stream_previews=stream_previews,
        )

        data = self._post("/text-to-voice/design", payload, params=params)
        try:
            previews = [VoicePreview(**item) for item in data.get("previews") or []]
        except (TypeError, ValidationError) as e:
            raise VoiceLabError(f"Malformed preview payload: {e}") from e

        if not previews:
            raise VoiceLabError("Failed to generate preview.")

        logger.info(f"Designed {len(previews)} voice previews")
        return previews

    def create(
        self,
        voice_name: str,
        description: str,
        generated_voice_id: str,
        labels: Optional[Dict[str, str]] = None,
        played_not_selected_voice_ids: Optional[List[str]] = None
    ) -> SavedVoice:
        """
        Save a preview as a permanent voice and record it in history.

        ``labels`` and ``played_not_selected_voice_ids`` are forwarded when
        given.

        Raises:
            ValueError: A required field is blank
            VoiceLabError: Request failed or returned no voice id
        """
        for field, value in (
            ("voice_name", voice_name),
            ("voice_description", description),
            ("generated_voice_id", generated_voice_id),
        ):
            if not value or not value.strip():
                raise ValueError(f"{field} is required.")

        payload = {
            "voice_name": voice_name,
            "voice_description": description,
            "generated_voice_id": generated_voice_id,
        }
        if labels:
            payload["labels"] = labels
        if played_not_selected_voice_ids:
            payload["played_not_selected_voice_ids"] = played_not_selected_voice_ids

        data = self._post("/text-to-voice/create", payload)
        voice_id = data.get("voice_id")
        if not voice_id:
            raise VoiceLabError("ElevenLabs did not return a voice_id.")

        voice = SavedVoice(
            voice_id=voice_id,
            name=voice_name,
            description=description,
            generated_voice_id=generated_voice_id,
        )
        self.history = [voice] + self.history[:self.HISTORY_LIMIT - 1]
        self._save_history()
        logger.info(f"Created voice {voice_id} ({voice_name})")
        return voice

    def clear_history(self):
        self.history = []
        try:
            self.snapshots.delete(self.HISTORY_KEY)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to clear voice history: {e}")

    def _load_history(self) -> List[SavedVoice]:
        try:
            payload = self.snapshots.load(self.HISTORY_KEY)
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Could not read voice history: {e}")
            return []
        if not payload:
            return []
        try:
            entries = json.loads(payload)
            return [SavedVoice(**entry) for entry in entries][:self.HISTORY_LIMIT]
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Discarding corrupt voice history: {e}")
            return []

    def _save_history(self):
        payload = json.dumps([v.model_dump(mode="json", by_alias=True) for v in self.history])
        try:
            self.snapshots.save(self.HISTORY_KEY, payload)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to persist voice history: {e}")
