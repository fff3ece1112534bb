"""Per-lug readings for every drum head visited during a tuning session."""

import math
import numbers
import threading
from collections import deque
from datetime import datetime
from typing import Callable, Deque, Dict, List, Optional, Tuple

from .drums import DrumPreset
from .logging_config import get_logger
from .stats import classify_deviation, reading_statistics
from .tuning_types import (
    ConfigurationKey,
    Deviation,
    HeadSide,
    HistoryEntry,
    TuningStatistics,
)

logger = get_logger(__name__)

HISTORY_CAPACITY = 20


class InvalidStateError(RuntimeError):
    """Raised when the session is used against its contract."""


class _ReadingSet:
    """One optional frequency per lug position."""

    def __init__(self, lug_count: int):
        self.values: List[Optional[float]] = [None] * lug_count

    @property
    def lug_count(self) -> int:
        return len(self.values)

    def resize(self, lug_count: int) -> None:
        if lug_count < self.lug_count:
            del self.values[lug_count:]
        else:
            self.values.extend([None] * (lug_count - self.lug_count))

    def clear(self) -> None:
        self.values = [None] * self.lug_count


class TuningSession:
    """In-memory store of lug readings keyed by (drum, head side).

    Readings of every configuration visited are kept, so switching to
    another drum or head and back restores them unchanged. All operations
    act on the active configuration and are serialized by one lock, so
    the session can be shared between a capture thread and a UI thread.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        """Initialize an empty session.

        Args:
            clock: Source of history timestamps
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._reading_sets: Dict[ConfigurationKey, _ReadingSet] = {}
        self._history: Deque[HistoryEntry] = deque(maxlen=HISTORY_CAPACITY)

        self._active_key: Optional[ConfigurationKey] = None
        self._instrument_name: Optional[str] = None
        self._frequency_range: Optional[Tuple[float, float]] = None
        self._target: Optional[float] = None
        self._active_position: Optional[int] = None
        self._size: Optional[str] = None

    # ---------------------------------------------------------------- config

    def select_configuration(
        self,
        instrument_id: str,
        head_side,
        lug_count: int,
        freq_range: Tuple[float, float],
        instrument_name: Optional[str] = None,
    ) -> ConfigurationKey:
        """Make (instrument_id, head_side) the active configuration.

        Creates an empty ReadingSet on first visit and resets the target to
        the middle of ``freq_range``. Other configurations are untouched.

        Args:
            instrument_id: Identifier of the drum
            head_side: HeadSide or its name ("batter"/"resonant")
            lug_count: Number of tensioning positions, at least 1
            freq_range: (low, high) tuning range in Hz
            instrument_name: Name used in history entries, defaults to the id

        Returns:
            The now-active key

        Raises:
            ValueError: If lug_count or freq_range is invalid
        """
        head_side = HeadSide.parse(head_side)
        if (
            isinstance(lug_count, bool)
            or not isinstance(lug_count, numbers.Integral)
            or lug_count < 1
        ):
            raise ValueError(f"Lug count must be a positive integer, got {lug_count!r}")
        low, high = (float(v) for v in freq_range)
        if not (math.isfinite(low) and math.isfinite(high)) or low > high:
            raise ValueError(f"Invalid frequency range: {freq_range!r}")

        key = ConfigurationKey(instrument_id, head_side)
        with self._lock:
            reading_set = self._reading_sets.get(key)
            if reading_set is None:
                self._reading_sets[key] = _ReadingSet(lug_count)
                logger.debug(f"Created reading set for {key} with {lug_count} lugs")
            elif reading_set.lug_count != lug_count:
                logger.warning(
                    f"Lug count for {key} changed from {reading_set.lug_count} to {lug_count}"
                )
                reading_set.resize(lug_count)

            self._active_key = key
            self._instrument_name = instrument_name or instrument_id
            self._frequency_range = (low, high)
            self._target = (low + high) / 2
            self._active_position = None

        logger.info(f"Selected {key}: {lug_count} lugs, target {self._target:g} Hz")
        return key

    def select_drum(
        self, preset: DrumPreset, head_side=HeadSide.BATTER, size: Optional[str] = None
    ) -> ConfigurationKey:
        """Select a drum preset and one of its heads.

        Raises:
            ValueError: If ``size`` is not offered by the preset
        """
        if size is not None and size not in preset.sizes:
            raise ValueError(
                f"{preset.name} has no {size} size (available: {', '.join(preset.sizes)})"
            )
        with self._lock:
            key = self.select_configuration(
                preset.id,
                head_side,
                preset.lugs,
                preset.frequency_range(head_side),
                instrument_name=preset.name,
            )
            self._size = size or preset.default_size
        return key

    @property
    def active_key(self) -> Optional[ConfigurationKey]:
        with self._lock:
            return self._active_key

    @property
    def size(self) -> Optional[str]:
        with self._lock:
            return self._size

    @property
    def frequency_range(self) -> Optional[Tuple[float, float]]:
        with self._lock:
            return self._frequency_range

    @property
    def lug_count(self) -> int:
        with self._lock:
            return self._require_active().lug_count

    @property
    def target_frequency(self) -> Optional[float]:
        with self._lock:
            return self._target

    def set_target(self, hz: float) -> None:
        """Override the target frequency; the range is advisory and not enforced."""
        with self._lock:
            self._require_active()
            self._target = float(hz)
        logger.info(f"Target frequency set to {hz:g} Hz")

    # ------------------------------------------------------------- positions

    @property
    def active_position(self) -> Optional[int]:
        with self._lock:
            return self._active_position

    def select_position(self, position: Optional[int]) -> None:
        """Choose the lug that ``record_active`` writes to (None deselects)."""
        with self._lock:
            if position is not None:
                self._check_position(self._require_active(), position)
            self._active_position = position

    def record(self, position: int, frequency_hz: Optional[float]) -> Optional[int]:
        """Store a reading for ``position`` and log it in the history.

        A missing or non-finite frequency is ignored.

        Args:
            position: Zero-based lug index
            frequency_hz: Current frequency, or None if there is none

        Returns:
            The next position, ``(position + 1) % lug_count``, or None if
            nothing was recorded

        Raises:
            InvalidStateError: If no configuration is active or the position is
                out of range
        """
        with self._lock:
            reading_set = self._require_active()
            self._check_position(reading_set, position)

            if frequency_hz is None or not math.isfinite(frequency_hz):
                logger.debug(f"No frequency to record for lug {position + 1}")
                return None

            frequency_hz = float(frequency_hz)
            reading_set.values[position] = frequency_hz
            self._history.appendleft(
                HistoryEntry(
                    position=position + 1,
                    frequency=frequency_hz,
                    instrument=self._instrument_name,
                    head_side=self._active_key.head_side,
                    timestamp=self._clock(),
                )
            )
            next_position = (position + 1) % reading_set.lug_count
            self._active_position = next_position

        logger.info(f"Recorded lug {position + 1} of {self._active_key}: {frequency_hz:g} Hz")
        return next_position

    def record_active(self, frequency_hz: Optional[float]) -> Optional[int]:
        """Record at the active position and advance to the next one.

        Returns:
            The new active position, or None if nothing was recorded
        """
        with self._lock:
            if self._active_position is None:
                logger.debug("No lug selected, nothing recorded")
                return None
            return self.record(self._active_position, frequency_hz)

    def clear(self) -> None:
        """Unset every reading of the active configuration; history is kept."""
        with self._lock:
            self._require_active().clear()
            self._active_position = None
        logger.info(f"Cleared readings for {self._active_key}")

    # ----------------------------------------------------------------- views

    def readings(self) -> Dict[int, Optional[float]]:
        """Copy of the active readings, keyed by zero-based position."""
        with self._lock:
            return dict(enumerate(self._require_active().values))

    def statistics(self) -> TuningStatistics:
        with self._lock:
            reading_set = self._require_active()
            return reading_statistics(reading_set.values, reading_set.lug_count)

    def deviation(self, frequency_hz: float) -> Deviation:
        """Compare a frequency with the active target."""
        with self._lock:
            self._require_active()
            return classify_deviation(frequency_hz, self._target)

    @property
    def history(self) -> List[HistoryEntry]:
        """Committed readings, most recent first."""
        with self._lock:
            return list(self._history)

    def recent_history(self, limit: int = 12) -> List[HistoryEntry]:
        with self._lock:
            return list(self._history)[:limit]

    # --------------------------------------------------------------- helpers

    def _require_active(self) -> _ReadingSet:
        if self._active_key is None:
            raise InvalidStateError("No drum configuration selected")
        return self._reading_sets[self._active_key]

    @staticmethod
    def _check_position(reading_set: _ReadingSet, position: int) -> None:
        if (
            isinstance(position, bool)
            or not isinstance(position, numbers.Integral)
            or not 0 <= position < reading_set.lug_count
        ):
            raise InvalidStateError(
                f"Lug position {position!r} outside [0, {reading_set.lug_count})"
            )
