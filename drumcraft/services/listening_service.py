"""Listening service that wires an audio source to the pitch estimator."""

from __future__ import annotations
import threading
import time
from typing import Optional, Callable

from ..logging_config import get_logger
from ..stats import round_half_up, volume_level
from ..tuning_types import PitchEstimate
from ..core.interfaces import IAudioSource, IPitchEstimator, IListeningService

logger = get_logger(__name__)


class ListeningService(IListeningService):
    """Polls an audio source once per cycle and tracks the current reading.

    A ``Detected`` estimate is only accepted inside the plausible range
    (``min_frequency`` < f < ``max_frequency``); accepted values are rounded
    to ``precision`` decimals and stay current until a newer one is accepted
    or listening stops.
    """

    def __init__(
        self,
        audio_source: IAudioSource,
        estimator: IPitchEstimator,
        min_frequency: float = 30.0,
        max_frequency: float = 1000.0,
        poll_interval: float = 1 / 60,
        precision: int = 1,
    ) -> None:
        """Initialize the listening service.

        Args:
            audio_source: Where windows come from
            estimator: Pitch estimator applied to every window
            min_frequency: Lowest frequency accepted as a reading (exclusive)
            max_frequency: Highest frequency accepted as a reading (exclusive)
            poll_interval: Seconds between cycles in ``run``
            precision: Decimal places kept in the current frequency
        """
        self._audio_source = audio_source
        self._estimator = estimator
        self._min_frequency = min_frequency
        self._max_frequency = max_frequency
        self._poll_interval = poll_interval
        self._precision = precision

        self._callback: Optional[Callable[[PitchEstimate], None]] = None
        self._listening = False
        self._thread: Optional[threading.Thread] = None

        self._current_frequency: Optional[float] = None
        self._last_estimate: Optional[PitchEstimate] = None
        self._volume = 0.0

    @property
    def current_frequency(self) -> Optional[float]:
        """Most recent accepted frequency, or None."""
        return self._current_frequency

    @property
    def last_estimate(self) -> Optional[PitchEstimate]:
        return self._last_estimate

    @property
    def volume(self) -> float:
        """Loudness of the last window as a 0-1 meter level."""
        return self._volume

    def is_listening(self) -> bool:
        return self._listening

    def start(self, callback: Optional[Callable[[PitchEstimate], None]] = None) -> bool:
        """Start the audio source.

        Args:
            callback: Called with every estimate produced while listening

        Returns:
            True if listening, False if the audio source could not start
        """
        if self._listening:
            logger.warning("Already listening")
            return True

        if not self._audio_source.start():
            logger.error("Audio source failed to start, not listening")
            return False

        self._callback = callback
        self._listening = True
        logger.info(f"Listening at {self._audio_source.sample_rate} Hz")
        return True

    def stop(self) -> None:
        """Stop listening and release the audio source."""
        if not self._listening:
            return

        self._listening = False

        # The worker may be inside read_window; release the source only after it exits
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

        self._audio_source.stop()
        self._current_frequency = None
        self._volume = 0.0
        logger.info("Listening stopped")

    def poll(self) -> Optional[PitchEstimate]:
        """Run one capture/estimation cycle.

        Returns:
            The estimate for this cycle, or None when not listening or no
            window was available
        """
        if not self._listening:
            return None

        window = self._audio_source.read_window()
        if window is None:
            if not self._audio_source.is_running():
                logger.info("Audio source exhausted")
                self.stop()
            return None

        estimate = self._estimator.estimate(window)

        # stop() may have been requested while estimating
        if not self._listening:
            return None

        self._last_estimate = estimate
        self._volume = volume_level(estimate.rms)
        if estimate.is_detected and self.accepts(estimate.frequency):
            self._current_frequency = round_half_up(estimate.frequency, self._precision)

        if self._callback:
            self._callback(estimate)
        return estimate

    def accepts(self, frequency: float) -> bool:
        """Whether a detected frequency is inside the plausible range."""
        return self._min_frequency < frequency < self._max_frequency

    def run(self, max_cycles: Optional[int] = None, duration: Optional[float] = None) -> int:
        """Poll repeatedly until stopped, exhausted or a limit is reached.

        Args:
            max_cycles: Stop after this many cycles, or None for no limit
            duration: Stop after this many seconds, or None for no limit

        Returns:
            Number of cycles run
        """
        cycles = 0
        deadline = time.monotonic() + duration if duration is not None else None
        while self._listening:
            if max_cycles is not None and cycles >= max_cycles:
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            self.poll()
            cycles += 1
            if self._poll_interval:
                time.sleep(self._poll_interval)
        return cycles

    def run_in_background(self, max_cycles: Optional[int] = None) -> threading.Thread:
        """Run the polling loop on a worker thread; ``stop`` joins it."""
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._thread = threading.Thread(
            target=self.run, kwargs={"max_cycles": max_cycles}, daemon=True
        )
        self._thread.start()
        return self._thread
