"""Ownership of synthesized speech clips and sound-effect tones."""

import asyncio
import io
import logging
from typing import Optional

import numpy as np
import soundfile as sf

from schemas.responses import SfxKind
from services.errors import PlaybackError
from .devices import AudioDevice
from .tones import ToneGenerator

logger = logging.getLogger(__name__)


class SpeechClip:
    """Playable handle over decoded speech audio."""

    def __init__(self, device: AudioDevice, samples: np.ndarray, sample_rate: int):
        self.device = device
        self.samples = samples
        self.sample_rate = sample_rate
        self._cursor = 0
        self._stream = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._done = asyncio.Event()
        self.finished = False
        self.released = False

    @classmethod
    def decode(cls, device: AudioDevice, data: bytes) -> "SpeechClip":
        """
        Decode encoded audio bytes (WAV, MP3, FLAC, OGG).

        Raises:
            PlaybackError: Bytes are empty or not decodable
        """
        if not data:
            raise PlaybackError("No audio returned")
        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (RuntimeError, TypeError, ValueError) as e:
            raise PlaybackError(f"Could not decode audio: {e}") from e
        return cls(device, samples, sample_rate)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate if self.sample_rate else 0.0

    def _next_frames(self, frames: int) -> np.ndarray:
        chunk = self.samples[self._cursor:self._cursor + frames]
        self._cursor += len(chunk)
        return chunk

    def _mark_finished(self):
        if self.finished:
            return
        self.finished = True
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._done.set)
        else:
            self._done.set()

    def start(self):
        """Start playback on the device."""
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        try:
            self._stream = self.device.open_output(
                self._next_frames,
                sample_rate=self.sample_rate,
                channels=self.samples.shape[1],
                on_finished=self._mark_finished
            )
            self._stream.start()
        except Exception as e:
            self._stream = None
            self._mark_finished()
            raise PlaybackError(f"Could not start playback: {e}") from e
        logger.info(f"Playing speech clip ({self.duration:.1f}s)")

    async def wait(self):
        """Wait until playback ends or the clip is released."""
        if self.finished:
            return
        await self._done.wait()

    def release(self):
        """Stop playback and free the stream. Safe to call repeatedly."""
        self.released = True
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()
        self._mark_finished()


class PlaybackManager:
    """
    Holds at most one speech clip and at most one tone, independently.

    A new clip releases the previous one before it starts; a new tone stops
    the previous tone.
    """

    def __init__(
        self,
        device: AudioDevice,
        alert_frequency: float = 880.0,
        alert_duration: float = 0.25,
        alarm_frequency: float = 660.0,
        siren_frequencies: tuple = (600.0, 900.0),
        siren_interval: float = 0.5,
        tone_volume: float = 0.25,
        tone_sample_rate: int = 22050
    ):
        self.device = device
        self.alert_frequency = alert_frequency
        self.alert_duration = alert_duration
        self.alarm_frequency = alarm_frequency
        self.siren_frequencies = siren_frequencies
        self.siren_interval = siren_interval
        self.tone_volume = tone_volume
        self.tone_sample_rate = tone_sample_rate

        self.current_clip: Optional[SpeechClip] = None
        self._tone: Optional[ToneGenerator] = None

    def _release_finished_tone(self):
        if self._tone is not None and not self._tone.is_active:
            self.stop()

    @property
    def active_tone(self) -> Optional[ToneGenerator]:
        """The running tone; a tone that ended by itself is released here."""
        self._release_finished_tone()
        return self._tone

    def play_speech(self, data: bytes) -> SpeechClip:
        """
        Decode ``data`` and play it, replacing any current clip.

        Raises:
            PlaybackError: Decode or device failure
        """
        clip = SpeechClip.decode(self.device, data)
        self.stop_speech()
        self.current_clip = clip
        clip.start()
        return clip

    def stop_speech(self):
        clip, self.current_clip = self.current_clip, None
        if clip is not None:
            clip.release()

    def _build_tone(self, kind: SfxKind) -> ToneGenerator:
        if kind == SfxKind.ALERT:
            return ToneGenerator(
                kind, self.device, (self.alert_frequency,),
                sample_rate=self.tone_sample_rate,
                duration=self.alert_duration,
                volume=self.tone_volume
            )
        if kind == SfxKind.ALARM:
            return ToneGenerator(
                kind, self.device, (self.alarm_frequency,),
                sample_rate=self.tone_sample_rate,
                volume=self.tone_volume
            )
        if kind == SfxKind.SIREN:
            return ToneGenerator(
                kind, self.device, tuple(self.siren_frequencies),
                sample_rate=self.tone_sample_rate,
                interval=self.siren_interval,
                volume=self.tone_volume
            )
        raise ValueError(f"No tone for sfx '{kind}'")

    def play_sfx(self, kind: SfxKind) -> Optional[ToneGenerator]:
        """Start the tone for ``kind``; ``none`` leaves the current tone alone."""
        if kind == SfxKind.NONE:
            return None
        tone = self._build_tone(kind)
        self.stop()
        self._tone = tone
        try:
            tone.start()
        except Exception as e:
            self.stop()
            logger.warning(f"Could not play {kind.value} tone: {e}")
            return None
        self._release_finished_tone()
        return tone

    def stop(self):
        """Stop the active tone and release its resources."""
        tone, self._tone = self._tone, None
        if tone is not None:
            tone.stop()

    def close(self):
        """Release every clip and tone (teardown)."""
        self.stop()
        self.stop_speech()
