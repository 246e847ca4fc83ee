"""Pydantic schemas for the FieldOps voice console."""

from .telemetry import OpsMode, Route, TelemetryState
from .context import DeviceReport, HistoryMessage, OpsStatus, RequestContext, ReplyRequest
from .responses import (
    SfxKind,
    AgentReply,
    ParsePath,
    ParsedReply,
    TranscriptionResult,
    SynthesizedAudio,
    ReplyPayload,
)
from .voice import VoicePreview, VoicePreset, SavedVoice

__all__ = [
    "OpsMode",
    "Route",
    "TelemetryState",
    "DeviceReport",
    "HistoryMessage",
    "OpsStatus",
    "RequestContext",
    "ReplyRequest",
    "SfxKind",
    "AgentReply",
    "ParsePath",
    "ParsedReply",
    "TranscriptionResult",
    "SynthesizedAudio",
    "ReplyPayload",
    "VoicePreview",
    "VoicePreset",
    "SavedVoice",
]
