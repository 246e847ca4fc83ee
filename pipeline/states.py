"""States, events and the transition table of the recording controller."""

from enum import Enum


class PipelineState(str, Enum):
    """Where the voice pipeline currently is."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    GENERATING = "generating"
    SYNTHESIZING = "synthesizing"
    PLAYING = "playing"
    ERROR = "error"


class ControllerEvent(str, Enum):
    """Inputs that move the pipeline between states."""
    START = "start"
    STOP = "stop"
    TRANSCRIBED = "transcribed"
    REPLIED = "replied"
    SYNTHESIZED = "synthesized"
    PLAYBACK_ENDED = "playback_ended"
    FAILED = "failed"
    RESET = "reset"


# Anything not listed here is ignored by dispatch()
TRANSITIONS = {
    (PipelineState.IDLE, ControllerEvent.START): PipelineState.RECORDING,
    (PipelineState.RECORDING, ControllerEvent.STOP): PipelineState.TRANSCRIBING,
    (PipelineState.TRANSCRIBING, ControllerEvent.TRANSCRIBED): PipelineState.GENERATING,
    (PipelineState.GENERATING, ControllerEvent.REPLIED): PipelineState.SYNTHESIZING,
    (PipelineState.SYNTHESIZING, ControllerEvent.SYNTHESIZED): PipelineState.PLAYING,
    (PipelineState.PLAYING, ControllerEvent.PLAYBACK_ENDED): PipelineState.IDLE,
    (PipelineState.PLAYING, ControllerEvent.STOP): PipelineState.IDLE,
    (PipelineState.RECORDING, ControllerEvent.FAILED): PipelineState.ERROR,
    (PipelineState.TRANSCRIBING, ControllerEvent.FAILED): PipelineState.ERROR,
    (PipelineState.GENERATING, ControllerEvent.FAILED): PipelineState.ERROR,
    (PipelineState.SYNTHESIZING, ControllerEvent.FAILED): PipelineState.ERROR,
    (PipelineState.ERROR, ControllerEvent.RESET): PipelineState.IDLE,
}


def next_state(state: PipelineState, event: ControllerEvent):
    """Target state for ``event`` in ``state``, or None if undeclared."""
    return TRANSITIONS.get((state, event))
