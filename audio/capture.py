"""Microphone capture for push-to-talk recording."""

import io
import logging
from typing import List, Optional

import numpy as np
import soundfile as sf

from services.errors import MicrophoneUnavailableError
from .devices import AudioDevice

logger = logging.getLogger(__name__)


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode 16-bit PCM samples as an in-memory WAV file."""
    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()


class MicrophoneStream:
    """An open microphone plus the audio it has buffered so far."""

    def __init__(self, device: AudioDevice):
        self.device = device
        self._stream = None
        self._chunks: List[np.ndarray] = []

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self):
        """
        Acquire and start the microphone.

        Raises:
            MicrophoneUnavailableError: No input device, PortAudio missing,
                or the host refused access
        """
        if self._stream is not None:
            return
        self._chunks = []
        try:
            stream = self.device.open_input(self._chunks.append)
            stream.start()
        except Exception as e:
            logger.error(f"Microphone unavailable: {e}")
            raise MicrophoneUnavailableError(str(e)) from e

        self._stream = stream
        logger.info("Microphone opened")

    def stop(self) -> bytes:
        """
        Stop capture and return the buffered audio as one WAV payload.

        Returns:
            WAV bytes, or b"" when nothing was captured
        """
        self.release()
        if not self._chunks:
            logger.warning("No audio captured")
            return b""

        samples = np.concatenate(self._chunks)
        self._chunks = []
        logger.info(f"Captured {len(samples)} frames")
        return encode_wav(samples, self.device.sample_rate)

    def release(self):
        """Stop and close the stream if open. Buffered audio is kept."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()

    def discard(self):
        """Release the stream and drop buffered audio."""
        self.release()
        self._chunks = []

    @property
    def buffered_frames(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


def open_microphone(device: Optional[AudioDevice] = None) -> MicrophoneStream:
    """Create and open a microphone stream on ``device`` (default device if None)."""
    mic = MicrophoneStream(device or AudioDevice())
    mic.open()
    return mic
