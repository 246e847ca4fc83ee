"""sounddevice-backed audio streams."""

import logging
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Pull-style source: asked for N frames, returns up to N rows; fewer means done.
FrameSource = Callable[[int], np.ndarray]
FrameSink = Callable[[np.ndarray], None]


class AudioDevice:
    """
    Opens input/output streams on the host audio device.

    sounddevice is imported on first use so the rest of the console (and the
    tests, which substitute a fake device) work on hosts without PortAudio.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        input_device: Optional[int] = None,
        output_device: Optional[int] = None
    ):
        """
        Initialize audio device.

        Args:
            sample_rate: Capture sample rate in Hz
            channels: Capture channel count
            input_device: sounddevice input index (None = system default)
            output_device: sounddevice output index (None = system default)
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.input_device = input_device
        self.output_device = output_device
        self._sd = None

    def _sounddevice(self):
        if self._sd is None:
            import sounddevice as sd
            self._sd = sd
        return self._sd

    def open_input(self, sink: FrameSink):
        """
        Open (not start) a 16-bit capture stream.

        Args:
            sink: Receives a copy of every captured block (audio thread)

        Returns:
            Stream with start()/stop()/close()
        """
        sd = self._sounddevice()

        def callback(indata, frames, time_info, status):
            if status:
                logger.warning(f"Audio capture status: {status}")
            sink(indata.copy())

        return sd.InputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="int16",
            callback=callback,
            device=self.input_device,
        )

    def open_output(
        self,
        source: FrameSource,
        sample_rate: int,
        channels: int = 1,
        on_finished: Optional[Callable[[], None]] = None
    ):
        """
        Open (not start) a float32 playback stream fed by ``source``.

        The stream stops itself once the source returns fewer frames than
        requested; ``on_finished`` then runs on the audio thread.
        """
        sd = self._sounddevice()

        def callback(outdata, frames, time_info, status):
            if status:
                logger.debug(f"Audio playback status: {status}")
            chunk = source(frames)
            filled = len(chunk)
            outdata[:filled] = chunk
            if filled < frames:
                outdata[filled:] = 0
                raise sd.CallbackStop

        return sd.OutputStream(
            samplerate=sample_rate,
            channels=channels,
            dtype="float32",
            callback=callback,
            finished_callback=on_finished,
            device=self.output_device,
        )
