"""Sine tone synthesis for alert sound effects."""

import asyncio
import logging
import math
from typing import Optional, Tuple

import numpy as np

from schemas.responses import SfxKind
from .devices import AudioDevice

logger = logging.getLogger(__name__)


def sine_wave(
    frequency: float,
    duration: float,
    sample_rate: int = 16000,
    volume: float = 0.25
) -> np.ndarray:
    """Mono float32 sine wave."""
    samples = int(sample_rate * duration)
    t = np.arange(samples, dtype=np.float64) / sample_rate
    return (np.sin(2 * np.pi * frequency * t) * volume).astype(np.float32)


class ToneGenerator:
    """
    One tone voice on its own output stream.

    ``alert`` plays a fixed frequency for ``duration`` seconds and stops by
    itself; ``alarm`` holds one frequency and ``siren`` alternates between
    two every ``interval`` seconds until stop() is called.
    """

    def __init__(
        self,
        kind: SfxKind,
        device: AudioDevice,
        frequencies: Tuple[float, ...],
        sample_rate: int = 22050,
        duration: Optional[float] = None,
        interval: Optional[float] = None,
        volume: float = 0.25
    ):
        if kind == SfxKind.NONE:
            raise ValueError("No tone for sfx 'none'")
        self.kind = kind
        self.device = device
        self.frequencies = frequencies
        self.sample_rate = sample_rate
        self.volume = volume
        self.total_frames = int(duration * sample_rate) if duration else None
        self.interval_frames = int(interval * sample_rate) if interval else None

        self._position = 0
        self._phase = 0.0
        self._stream = None
        self._active = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_active(self) -> bool:
        return self._active

    def _frequency_track(self, count: int) -> np.ndarray:
        if len(self.frequencies) == 1 or not self.interval_frames:
            return np.full(count, self.frequencies[0], dtype=np.float64)
        index = np.arange(self._position, self._position + count) // self.interval_frames
        return np.where(index % 2 == 0, self.frequencies[0], self.frequencies[1]).astype(np.float64)

    def render(self, frames: int) -> np.ndarray:
        """Next block of samples, shape (n, 1); fewer than ``frames`` when finished."""
        count = frames
        if self.total_frames is not None:
            count = max(0, min(frames, self.total_frames - self._position))
        if count == 0:
            return np.zeros((0, 1), dtype=np.float32)

        step = 2 * np.pi * self._frequency_track(count) / self.sample_rate
        phases = self._phase + np.cumsum(step)
        block = (np.sin(phases - step) * self.volume).astype(np.float32)

        self._phase = math.fmod(phases[-1], 2 * np.pi)
        self._position += count
        return block.reshape(-1, 1)

    def _on_finished(self):
        # Runs on the audio thread; the stream is closed from the loop thread.
        self._active = False
        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self.stop)

    def start(self):
        if self._stream is not None:
            return
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None
        self._stream = self.device.open_output(
            self.render,
            sample_rate=self.sample_rate,
            channels=1,
            on_finished=self._on_finished
        )
        self._active = True
        self._stream.start()
        logger.debug(f"Tone started: {self.kind.value}")

    def stop(self):
        """Stop and release the stream. Safe to call repeatedly."""
        self._active = False
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.debug(f"Tone stopped: {self.kind.value}")
