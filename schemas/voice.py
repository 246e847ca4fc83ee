"""Voice Lab schemas."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class VoicePreview(BaseModel):
    """One generated voice preview returned by the design endpoint."""
    generated_voice_id: str
    audio_base_64: str
    media_type: str = "audio/mpeg"


class VoicePreset(BaseModel):
    """Starting point for a voice description and sample text."""
    name: str
    description: str
    text: str


class SavedVoice(BaseModel):
    """A voice created from a preview and kept in the local history."""
    model_config = ConfigDict(populate_by_name=True)

    voice_id: str = Field(alias="voiceId")
    name: str
    description: str
    generated_voice_id: str = Field(alias="generatedVoiceId")
    created_at: datetime = Field(default_factory=datetime.now, alias="createdAt")
