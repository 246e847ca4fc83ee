"""Voice interaction pipeline."""

from .states import ControllerEvent, PipelineState, TRANSITIONS
from .recording_controller import (
    MIC_UNAVAILABLE_MESSAGE,
    RecordingController,
    RecordingSession,
)

__all__ = [
    "ControllerEvent",
    "PipelineState",
    "TRANSITIONS",
    "MIC_UNAVAILABLE_MESSAGE",
    "RecordingController",
    "RecordingSession",
]
