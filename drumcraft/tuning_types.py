"""Type definitions for the DrumCraft project."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Optional

import numpy as np


@dataclass(frozen=True, eq=False)
class AudioWindow:
    """A fixed-length block of normalized samples captured at one sample rate."""

    samples: np.ndarray  # Mono samples, nominally in [-1, 1]
    sample_rate: float  # Hz
    timestamp: float = 0.0  # Capture time in seconds

    def __post_init__(self):
        if not self.sample_rate or self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

    def __len__(self):
        return len(self.samples)


class PitchStatus(Enum):
    """Outcome of a single pitch estimation."""

    NO_SIGNAL = auto()  # Loudness below the silence threshold
    INDETERMINATE = auto()  # Signal present, no usable periodicity
    DETECTED = auto()


@dataclass(frozen=True)
class PitchEstimate:
    """Result of estimating one AudioWindow."""

    status: PitchStatus
    rms: float
    frequency: Optional[float] = None  # Hz, only set when DETECTED

    @classmethod
    def no_signal(cls, rms: float) -> "PitchEstimate":
        return cls(PitchStatus.NO_SIGNAL, rms)

    @classmethod
    def indeterminate(cls, rms: float) -> "PitchEstimate":
        return cls(PitchStatus.INDETERMINATE, rms)

    @classmethod
    def detected(cls, frequency: float, rms: float) -> "PitchEstimate":
        return cls(PitchStatus.DETECTED, rms, frequency)

    @property
    def is_detected(self) -> bool:
        return self.status is PitchStatus.DETECTED

    def __str__(self):
        if self.is_detected:
            return f"{self.frequency:.1f} Hz (rms={self.rms:.4f})"
        return f"{self.status.name.lower()} (rms={self.rms:.4f})"


class HeadSide(Enum):
    """The two membranes of a drum."""

    BATTER = "batter"  # Struck side
    RESONANT = "resonant"

    @classmethod
    def parse(cls, value) -> "HeadSide":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown head side: {value!r} (expected one of "
                f"{', '.join(side.value for side in cls)})"
            ) from None


@dataclass(frozen=True)
class ConfigurationKey:
    """Identifies one ReadingSet: an instrument and one of its heads."""

    instrument_id: str
    head_side: HeadSide

    def __str__(self):
        return f"{self.instrument_id}/{self.head_side.value}"


@dataclass(frozen=True)
class HistoryEntry:
    """One committed reading."""

    position: int  # 1-based display index
    frequency: float  # Hz
    instrument: str  # Display name of the instrument
    head_side: HeadSide
    timestamp: datetime

    def __str__(self):
        return f"L{self.position} {self.frequency:g} Hz {self.head_side.value}"


@dataclass(frozen=True)
class TuningStatistics:
    """Aggregate view of the defined readings of one ReadingSet."""

    count: int  # Number of defined readings
    lug_count: int  # Number of positions in the ReadingSet
    mean: Optional[float]  # None when no reading is defined
    spread: float  # max - min, 0.0 with fewer than two readings
    is_even: bool  # spread below the evenness threshold

    @property
    def is_complete(self) -> bool:
        return self.count == self.lug_count


class DeviationClass(Enum):
    """How far a frequency is from the target."""

    ON_TARGET = auto()
    CLOSE = auto()
    OFF = auto()


@dataclass(frozen=True)
class Deviation:
    """Signed distance from the target frequency and its classification."""

    difference: float  # frequency - target, Hz
    classification: DeviationClass

    @property
    def label(self) -> str:
        if self.classification is DeviationClass.ON_TARGET:
            return "ON TARGET"
        if self.difference > 0:
            return f"+{self.difference:.1f} Hz HIGH"
        return f"{self.difference:.1f} Hz LOW"
