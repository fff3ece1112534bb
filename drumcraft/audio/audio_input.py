"""Live microphone input."""

from __future__ import annotations
import threading
import time
from typing import Optional, ClassVar, List

import numpy as np

from ..logging_config import get_logger
from ..tuning_types import AudioWindow
from ..core.interfaces import IAudioSource

logger = get_logger(__name__)


class SoundDeviceInput(IAudioSource):
    """Audio source reading the default (or a chosen) input device via sounddevice.

    The stream callback writes into a ring buffer holding the most recent
    ``window_size`` samples; ``read_window`` returns a snapshot of it, so a
    caller polling once per display frame always sees the latest audio.
    """

    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    WINDOW_SIZE: ClassVar[int] = 4096  # Samples handed to the estimator
    FRAMES_PER_BUFFER: ClassVar[int] = 1024  # Device block size
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_RATES: ClassVar[List[int]] = [48000, 44100, 22050, 16000, 8000]

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        window_size: Optional[int] = None,
        frames_per_buffer: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input.

        Args:
            device_id: Audio input device ID, or None for the system default
            sample_rate: Sample rate in Hz, or None for default (44100)
            window_size: Samples per window, or None for default (4096)
            frames_per_buffer: Device block size, or None for default (1024)
            channels: Number of audio channels, or None for default (1)
        """
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._window_size = window_size or self.WINDOW_SIZE
        self._frames_per_buffer = frames_per_buffer or self.FRAMES_PER_BUFFER
        self._channels = channels or self.CHANNELS

        self._stream = None
        self._running = False
        self._lock = threading.Lock()
        self._buffer = np.zeros(self._window_size, dtype=np.float32)
        self._filled = 0

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def window_size(self) -> int:
        return self._window_size

    def is_running(self) -> bool:
        return self._running

    def _audio_callback(self, indata: np.ndarray, _frames: int, _time_info, status) -> None:
        """Append a device block to the ring buffer.

        Called from the audio thread, so it only copies samples.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        block = indata[:, 0] if indata.ndim > 1 else indata
        block = block[-self._window_size :]
        with self._lock:
            self._buffer = np.roll(self._buffer, -len(block))
            self._buffer[-len(block) :] = block
            self._filled = min(self._filled + len(block), self._window_size)

    def read_window(self) -> Optional[AudioWindow]:
        """Return the latest full window, or None until the buffer has filled."""
        if not self._running:
            return None
        with self._lock:
            if self._filled < self._window_size:
                return None
            samples = self._buffer.copy()
        return AudioWindow(samples=samples, sample_rate=self._sample_rate, timestamp=time.time())

    def start(self) -> bool:
        """Open the input stream.

        Returns:
            True if capture started, False if no sample rate worked
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        import sounddevice as sd

        sample_rates_to_try = list(self.FALLBACK_RATES)
        if self._sample_rate in sample_rates_to_try:
            sample_rates_to_try.remove(self._sample_rate)
        sample_rates_to_try.insert(0, self._sample_rate)

        for rate in sample_rates_to_try:
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                self._stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frames_per_buffer,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
                self._stream.start()
            except Exception as e:
                logger.warning(f"Failed to start audio input with sample rate {rate} Hz: {e}")
                self._close_stream()
                continue

            self._sample_rate = rate
            with self._lock:
                self._buffer[:] = 0.0
                self._filled = 0
            self._running = True
            logger.info(f"Audio input started with sample rate {rate} Hz")
            return True

        logger.error("Could not start audio input with any sample rate")
        return False

    def stop(self) -> None:
        """Stop capturing audio."""
        if not self._running:
            return
        self._running = False
        self._close_stream()
        logger.info("Audio input stopped")

    def _close_stream(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except Exception as e:
            logger.error(f"Error closing audio stream: {e}")
        finally:
            self._stream = None
