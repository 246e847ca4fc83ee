"""Memory data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class Speaker(str, Enum):
    """Who produced a turn."""
    AGENT = "GBird"
    USER = "You"


class Channel(str, Enum):
    """How a turn entered the console."""
    VOICE = "voice"
    COMMS = "comms"


class ConversationTurn(BaseModel):
    """A single immutable turn in the conversation log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    speaker: Speaker = Field(alias="from")
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    channel: Channel = Field(Channel.VOICE, alias="mode")

    @property
    def role(self) -> str:
        """Chat role used when the turn is replayed as history."""
        return "user" if self.speaker == Speaker.USER else "assistant"

    @property
    def time_label(self) -> str:
        return self.timestamp.strftime("%H:%M")

    def to_snapshot(self) -> Dict[str, Any]:
        """Serialize for the persisted snapshot."""
        return {
            "from": self.speaker.value,
            "text": self.text,
            "time": self.time_label,
            "mode": self.channel.value,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "ConversationTurn":
        """
        Rebuild a turn from a snapshot entry.

        Entries written without a full timestamp only carry an HH:MM label;
        those are placed on today's date.
        """
        if not isinstance(data, dict):
            raise ValueError(f"snapshot entry is not an object: {data!r}")

        raw_ts = data.get("timestamp")
        if raw_ts:
            timestamp = datetime.fromisoformat(raw_ts)
        else:
            timestamp = datetime.now()
            label = data.get("time")
            if label:
                parsed = datetime.strptime(label, "%H:%M")
                timestamp = timestamp.replace(
                    hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0
                )

        return cls(
            speaker=Speaker(data["from"]),
            text=data["text"],
            timestamp=timestamp,
            channel=Channel(data.get("mode", Channel.VOICE.value)),
        )


def agent_turn(text: str, channel: Channel = Channel.VOICE) -> ConversationTurn:
    return ConversationTurn(speaker=Speaker.AGENT, text=text, channel=channel)


def user_turn(text: str, channel: Channel = Channel.VOICE) -> ConversationTurn:
    return ConversationTurn(speaker=Speaker.USER, text=text, channel=channel)
