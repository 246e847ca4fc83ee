"""Audio capture, playback and tone generation."""

from .devices import AudioDevice
from .capture import MicrophoneStream, encode_wav, open_microphone
from .tones import ToneGenerator, sine_wave
from .playback import PlaybackManager, SpeechClip

__all__ = [
    "AudioDevice",
    "MicrophoneStream",
    "encode_wav",
    "open_microphone",
    "ToneGenerator",
    "sine_wave",
    "PlaybackManager",
    "SpeechClip",
]
