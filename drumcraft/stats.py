"""Numeric helpers shared by the estimator and the tuning session."""

from typing import Iterable, Optional

import numpy as np

from .tuning_types import Deviation, DeviationClass, TuningStatistics

# Readings whose spread is below this are considered evenly tuned (Hz)
EVENNESS_THRESHOLD = 5.0

# Deviation bands around the target (Hz)
ON_TARGET_BAND = 3.0
CLOSE_BAND = 8.0

# rms * VOLUME_GAIN is shown as a 0-1 level meter
VOLUME_GAIN = 5.0


def compute_rms(samples: np.ndarray) -> float:
    """Root-mean-square amplitude of a sample block (0.0 for an empty block)."""
    if len(samples) == 0:
        return 0.0
    samples = np.asarray(samples, dtype=np.float64)
    return float(np.sqrt(np.mean(samples**2)))


def volume_level(rms: float) -> float:
    return min(rms * VOLUME_GAIN, 1.0)


def reading_statistics(
    readings: Iterable[Optional[float]], lug_count: int
) -> TuningStatistics:
    """Derive count, mean, spread and evenness from the defined readings.

    Args:
        readings: One value per position, None for positions not yet recorded
        lug_count: Number of positions the readings cover

    Returns:
        TuningStatistics computed from the defined values only
    """
    defined = np.array([r for r in readings if r is not None], dtype=np.float64)

    if defined.size == 0:
        return TuningStatistics(
            count=0, lug_count=lug_count, mean=None, spread=0.0, is_even=True
        )

    spread = float(defined.max() - defined.min()) if defined.size > 1 else 0.0
    return TuningStatistics(
        count=int(defined.size),
        lug_count=lug_count,
        mean=float(np.mean(defined)),
        spread=spread,
        is_even=spread < EVENNESS_THRESHOLD,
    )


def classify_deviation(frequency: float, target: float) -> Deviation:
    """Signed difference from ``target`` and its ON_TARGET/CLOSE/OFF band."""
    difference = frequency - target
    magnitude = abs(difference)
    if magnitude < ON_TARGET_BAND:
        classification = DeviationClass.ON_TARGET
    elif magnitude < CLOSE_BAND:
        classification = DeviationClass.CLOSE
    else:
        classification = DeviationClass.OFF
    return Deviation(difference=difference, classification=classification)


def round_half_up(value: float, precision: int = 1) -> float:
    """Round to ``precision`` decimals with ties going up (100.25 -> 100.3)."""
    scale = 10**precision
    return float(np.floor(value * scale + 0.5) / scale)
