import math

import numpy as np
import pytest

from drumcraft.audio.pitch_estimator import PitchEstimator
from drumcraft.stats import compute_rms
from drumcraft.tuning_types import AudioWindow, PitchStatus

SAMPLE_RATE = 44100
WINDOW_SIZE = 4096


def sine_window(frequency, sample_rate=SAMPLE_RATE, size=WINDOW_SIZE, amplitude=0.5, phase=0.0):
    t = np.arange(size) / sample_rate
    samples = amplitude * np.sin(2 * np.pi * frequency * t + phase)
    return AudioWindow(samples=samples.astype(np.float32), sample_rate=sample_rate)


@pytest.fixture
def estimator():
    return PitchEstimator()


def test_silence_is_no_signal(estimator):
    result = estimator.estimate(AudioWindow(np.zeros(WINDOW_SIZE), SAMPLE_RATE))
    assert result.status is PitchStatus.NO_SIGNAL
    assert result.rms == 0.0
    assert result.frequency is None


def test_quiet_tone_reports_its_rms(estimator):
    window = sine_window(220.0, amplitude=0.005)
    result = estimator.estimate(window)
    assert result.status is PitchStatus.NO_SIGNAL
    assert result.rms == pytest.approx(compute_rms(window.samples), rel=1e-9)
    assert result.rms == pytest.approx(0.005 / math.sqrt(2), rel=0.01)


@pytest.mark.parametrize(
    "frequency, sample_rate",
    [
        (55.0, 44100),
        (82.41, 44100),
        (110.0, 44100),
        (220.0, 44100),
        (275.0, 44100),
        (330.0, 44100),
        (440.0, 44100),
        (880.0, 44100),
        (1000.0, 44100),
        (220.0, 48000),
        (150.0, 22050),
    ],
)
def test_pure_sine_within_two_percent(estimator, frequency, sample_rate):
    result = estimator.estimate(sine_window(frequency, sample_rate=sample_rate))
    assert result.status is PitchStatus.DETECTED
    assert abs(result.frequency - frequency) / frequency < 0.02


@pytest.mark.parametrize("phase", [0.5, math.pi / 3, math.pi])
def test_loud_edges_are_trimmed(estimator, phase):
    # Starting mid-cycle puts loud samples at the window edges
    result = estimator.estimate(sine_window(196.0, amplitude=0.9, phase=phase))
    assert result.is_detected
    assert abs(result.frequency - 196.0) / 196.0 < 0.02


def test_noisy_tone_is_detected(estimator):
    rng = np.random.default_rng(7)
    window = sine_window(146.8)
    noisy = AudioWindow(
        samples=window.samples + rng.normal(0.0, 0.05, WINDOW_SIZE), sample_rate=SAMPLE_RATE
    )
    result = estimator.estimate(noisy)
    assert result.is_detected
    assert abs(result.frequency - 146.8) / 146.8 < 0.02


def test_rms_is_reported_with_detection(estimator):
    window = sine_window(220.0)
    result = estimator.estimate(window)
    assert result.rms == pytest.approx(compute_rms(window.samples))


def test_constant_window_is_indeterminate(estimator):
    result = estimator.estimate(AudioWindow(np.full(4, 0.9), SAMPLE_RATE))
    assert result.status is PitchStatus.INDETERMINATE
    assert result.rms == pytest.approx(0.9)


def test_non_finite_samples_are_indeterminate(estimator):
    samples = sine_window(220.0).samples.astype(np.float64)
    samples[100] = np.nan
    result = estimator.estimate(AudioWindow(samples, SAMPLE_RATE))
    assert result.status is PitchStatus.INDETERMINATE


def _small_windows():
    rng = np.random.default_rng(3)
    windows = [
        np.zeros(4),
        np.ones(4),
        -np.ones(5),
        np.array([1.0, -1.0] * 4),
        np.array([0.0, 0.5, 0.0, -0.5]),
        np.array([0.3, 0.3, 0.0, 0.3, 0.3]),
    ]
    for size in (4, 5, 7, 16, 64, 512):
        windows.append(rng.uniform(-1.0, 1.0, size))
    return windows


@pytest.mark.parametrize("samples", _small_windows())
def test_never_raises_on_small_windows(estimator, samples):
    result = estimator.estimate(AudioWindow(samples, SAMPLE_RATE))
    assert result.status in PitchStatus
    assert np.isfinite(result.rms)
    if result.is_detected:
        assert np.isfinite(result.frequency)
        assert result.frequency > 0


def test_stereo_window_uses_first_channel(estimator):
    left = sine_window(220.0).samples
    right = np.zeros_like(left)
    result = estimator.estimate(AudioWindow(np.column_stack([left, right]), SAMPLE_RATE))
    assert result.is_detected
    assert abs(result.frequency - 220.0) / 220.0 < 0.02


def test_thresholds_are_configurable():
    strict = PitchEstimator(silence_threshold=0.5)
    assert strict.silence_threshold == 0.5
    assert strict.clip_threshold == PitchEstimator.DEFAULT_CLIP_THRESHOLD
    assert strict.estimate(sine_window(220.0)).status is PitchStatus.NO_SIGNAL


def test_window_requires_positive_sample_rate():
    with pytest.raises(ValueError):
        AudioWindow(np.zeros(16), 0)
    with pytest.raises(ValueError):
        AudioWindow(np.zeros(16), -44100)
