"""Application settings."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel


class Settings(BaseModel):
    """Application configuration settings."""

    # Reply provider settings
    llm_provider: str = "groq"  # "groq", "openai" or "anthropic"
    llm_model: Optional[str] = None  # Override default model for the provider

    # Transcription (Groq Whisper through the OpenAI-compatible endpoint)
    stt_model: str = "whisper-large-v3-turbo"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # Speech synthesis (ElevenLabs)
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_voice_id: str = "21m00Tcm4TlvDq8Ikwvj"
    elevenlabs_model: str = "eleven_turbo_v2_5"
    request_timeout: Optional[float] = None  # No timeout on upstream calls by default

    # API Keys
    groq_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    elevenlabs_api_key: Optional[str] = None

    # Memory settings
    db_path: str = "data/fieldops.db"
    memory_key: str = "gbird-memory"
    memory_capacity: int = 50
    history_window: int = 12

    # Audio settings
    sample_rate: int = 16000
    channels: int = 1
    alert_frequency: float = 880.0
    alert_duration: float = 0.25
    alarm_frequency: float = 660.0
    siren_low_frequency: float = 600.0
    siren_high_frequency: float = 900.0
    siren_interval: float = 0.5
    tone_volume: float = 0.25

    # Offline sample replies instead of live services
    demo_mode: bool = False

    # Logging
    verbose: bool = False

    def __init__(self, **data):
        # Auto-load API keys from environment if not provided
        env_keys = {
            "groq_api_key": "GROQ_API_KEY",
            "openai_api_key": "OPENAI_API_KEY",
            "anthropic_api_key": "ANTHROPIC_API_KEY",
            "elevenlabs_api_key": "ELEVENLABS_API_KEY",
        }
        for field_name, env_var in env_keys.items():
            if data.get(field_name) is None:
                data[field_name] = os.environ.get(env_var)

        super().__init__(**data)

    @classmethod
    def from_yaml(cls, path: str, **overrides) -> "Settings":
        """
        Load settings from a YAML file.

        Keys in the file map directly to field names. Explicit keyword
        overrides win over file values; a missing file yields defaults.

        Args:
            path: Path to YAML config file
            **overrides: Values that take precedence over the file

        Returns:
            Settings instance
        """
        data = {}
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {path} must contain a mapping")
            data.update(loaded)

        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)

    def get_llm_api_key(self) -> Optional[str]:
        """Get the API key for the configured reply provider."""
        if self.llm_provider == "groq":
            return self.groq_api_key
        elif self.llm_provider == "openai":
            return self.openai_api_key
        elif self.llm_provider == "anthropic":
            return self.anthropic_api_key
        return None
