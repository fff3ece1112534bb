import soundfile as sf
import numpy as np
from typing import Iterable, Iterator, Optional

from drumcraft.core.interfaces import IAudioSource
from drumcraft.logging_config import get_logger
from drumcraft.tuning_types import AudioWindow

logger = get_logger(__name__)


class WavFileAudioSource(IAudioSource):
    """Provides consecutive windows read from an audio file."""

    def __init__(
        self,
        file_path: str,
        window_size: int = 4096,
        hop_size: Optional[int] = None,
        loop: bool = False,
        gain: float = 1.0,
    ):
        self._file_path = file_path
        self._window_size = window_size
        self._hop_size = hop_size or window_size
        self._loop = loop
        self._gain = gain
        self._file: Optional[sf.SoundFile] = None
        self._position = 0

        with sf.SoundFile(self._file_path) as f:
            self._sample_rate = f.samplerate
            self._channels = f.channels
            self._frames = f.frames

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def channels(self) -> int:
        return self._channels

    def start(self) -> bool:
        if self._file is not None:
            return True
        self._file = sf.SoundFile(self._file_path)
        self._position = 0
        logger.info(
            f"Reading {self._file_path} ({self._frames} frames at {self._sample_rate} Hz)"
        )
        return True

    def stop(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def is_running(self) -> bool:
        return self._file is not None

    def read_window(self) -> Optional[AudioWindow]:
        """Return the next full window; the source stops itself at end of file."""
        if self._file is None:
            return None

        if self._position + self._window_size > self._frames:
            if self._loop and self._frames >= self._window_size:
                self._position = 0
            else:
                self.stop()
                return None

        self._file.seek(self._position)
        data = self._file.read(self._window_size, dtype="float32", always_2d=True)
        timestamp = self._position / self._sample_rate
        self._position += self._hop_size

        samples = data[:, 0].copy()
        if self._gain != 1.0:
            samples *= self._gain
        return AudioWindow(samples=samples, sample_rate=self._sample_rate, timestamp=timestamp)


class ToneAudioSource(IAudioSource):
    """Synthesizes a continuous sine tone, optionally with noise."""

    def __init__(
        self,
        frequency: float,
        sample_rate: int = 44100,
        window_size: int = 4096,
        amplitude: float = 0.5,
        noise: float = 0.0,
        max_windows: Optional[int] = None,
        seed: Optional[int] = None,
    ):
        self._frequency = frequency
        self._sample_rate = sample_rate
        self._window_size = window_size
        self._amplitude = amplitude
        self._noise = noise
        self._max_windows = max_windows
        self._rng = np.random.default_rng(seed)
        self._produced = 0
        self._running = False

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def window_size(self) -> int:
        return self._window_size

    def start(self) -> bool:
        self._running = True
        self._produced = 0
        return True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def read_window(self) -> Optional[AudioWindow]:
        if not self._running:
            return None
        if self._max_windows is not None and self._produced >= self._max_windows:
            self.stop()
            return None

        # Keep phase continuous across windows
        start = self._produced * self._window_size
        t = (np.arange(self._window_size) + start) / self._sample_rate
        samples = self._amplitude * np.sin(2 * np.pi * self._frequency * t)
        if self._noise:
            samples = samples + self._rng.normal(0.0, self._noise, self._window_size)

        self._produced += 1
        return AudioWindow(
            samples=samples.astype(np.float32),
            sample_rate=self._sample_rate,
            timestamp=start / self._sample_rate,
        )


class SequenceAudioSource(IAudioSource):
    """Replays a finite sequence of prepared windows."""

    def __init__(self, windows: Iterable[AudioWindow], sample_rate: int, window_size: int):
        self._windows = windows
        self._iterator: Optional[Iterator[AudioWindow]] = None
        self._sample_rate = sample_rate
        self._window_size = window_size

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def window_size(self) -> int:
        return self._window_size

    def start(self) -> bool:
        if self._iterator is None:
            self._iterator = iter(self._windows)
        return True

    def stop(self) -> None:
        self._iterator = None

    def is_running(self) -> bool:
        return self._iterator is not None

    def read_window(self) -> Optional[AudioWindow]:
        if self._iterator is None:
            return None
        try:
            return next(self._iterator)
        except StopIteration:
            self.stop()
            return None
