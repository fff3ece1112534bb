"""Autocorrelation pitch estimation for sustained tones."""

from __future__ import annotations
import numpy as np
from typing import ClassVar, Optional

from ..logging_config import get_logger
from ..stats import compute_rms
from ..tuning_types import AudioWindow, PitchEstimate
from ..core.interfaces import IPitchEstimator

logger = get_logger(__name__)


class PitchEstimator(IPitchEstimator):
    """Estimates the fundamental frequency of a window by autocorrelation.

    The window is gated on RMS loudness, its loud edges are trimmed, and the
    strongest autocorrelation peak past the zero-lag lobe is refined with
    parabolic interpolation. Instances hold only their thresholds, so one
    estimator can be shared freely.
    """

    DEFAULT_SILENCE_THRESHOLD: ClassVar[float] = 0.01  # RMS below this is silence
    DEFAULT_CLIP_THRESHOLD: ClassVar[float] = 0.2  # Edge samples louder than this are trimmed

    def __init__(
        self,
        silence_threshold: Optional[float] = None,
        clip_threshold: Optional[float] = None,
    ) -> None:
        """Initialize the estimator.

        Args:
            silence_threshold: Minimum RMS to attempt detection, or None for default (0.01)
            clip_threshold: Amplitude marking the end of an edge transient, or None for default (0.2)
        """
        self._silence_threshold = (
            self.DEFAULT_SILENCE_THRESHOLD if silence_threshold is None else silence_threshold
        )
        self._clip_threshold = (
            self.DEFAULT_CLIP_THRESHOLD if clip_threshold is None else clip_threshold
        )

    @property
    def silence_threshold(self) -> float:
        return self._silence_threshold

    @property
    def clip_threshold(self) -> float:
        return self._clip_threshold

    def estimate(self, window: AudioWindow) -> PitchEstimate:
        """Estimate the pitch of one window.

        Args:
            window: Samples and the rate they were captured at

        Returns:
            NO_SIGNAL below the silence threshold, INDETERMINATE when no usable
            period is found, otherwise DETECTED with the frequency in Hz
        """
        samples = np.asarray(window.samples, dtype=np.float64)
        if samples.ndim > 1:
            samples = samples[:, 0]

        rms = compute_rms(samples)
        if not np.isfinite(rms):
            logger.debug("Non-finite samples in window, skipping")
            return PitchEstimate.indeterminate(0.0)

        if rms < self._silence_threshold:
            return PitchEstimate.no_signal(rms)

        trimmed = self._trim_edges(samples)
        size = len(trimmed)
        if size <= 2:
            logger.debug(f"Window degenerate after trimming ({size} samples)")
            return PitchEstimate.indeterminate(rms)

        # c[i] = sum_j x[j] * x[j + i]
        corr = np.correlate(trimmed, trimmed, mode="full")[size - 1 :]

        # Walk down the zero-lag lobe to its first local minimum
        lag = 0
        while lag + 1 < size and corr[lag] > corr[lag + 1]:
            lag += 1
        if lag + 1 >= size:
            return PitchEstimate.indeterminate(rms)

        peak = lag + int(np.argmax(corr[lag:]))
        if peak <= 0 or peak >= size - 1:
            return PitchEstimate.indeterminate(rms)

        period = self._refine_peak(corr, peak)
        if period <= 0:
            return PitchEstimate.indeterminate(rms)

        frequency = window.sample_rate / period
        if not np.isfinite(frequency):
            return PitchEstimate.indeterminate(rms)

        logger.debug(f"lag={peak} period={period:.3f} freq={frequency:.2f}Hz rms={rms:.4f}")
        return PitchEstimate.detected(float(frequency), rms)

    def _trim_edges(self, samples: np.ndarray) -> np.ndarray:
        """Drop loud leading and trailing samples up to the first quiet one."""
        size = len(samples)
        limit = (size + 1) // 2
        quiet = np.abs(samples) < self._clip_threshold

        start = 0
        for i in range(limit):
            if quiet[i]:
                start = i
                break

        end = size - 1
        for i in range(1, limit):
            if quiet[size - i]:
                end = size - i
                break

        return samples[start:end]

    @staticmethod
    def _refine_peak(corr: np.ndarray, peak: int) -> float:
        """Fit a parabola through the peak and its neighbours."""
        left, centre, right = corr[peak - 1], corr[peak], corr[peak + 1]
        a = (left + right - 2 * centre) / 2
        b = (right - left) / 2
        if a == 0:
            return float(peak)
        return float(peak - b / (2 * a))
