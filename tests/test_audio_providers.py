import numpy as np
import pytest
import soundfile as sf

from drumcraft.services.audio_providers import (
    SequenceAudioSource,
    ToneAudioSource,
    WavFileAudioSource,
)
from drumcraft.tuning_types import AudioWindow

SAMPLE_RATE = 44100


@pytest.fixture
def tone_file(tmp_path):
    path = tmp_path / "tone_220.wav"
    t = np.arange(SAMPLE_RATE) / SAMPLE_RATE
    sf.write(str(path), 0.5 * np.sin(2 * np.pi * 220.0 * t), SAMPLE_RATE)
    return str(path)


def drain(source, limit=1000):
    windows = []
    for _ in range(limit):
        window = source.read_window()
        if window is None:
            break
        windows.append(window)
    return windows


def test_wav_source_reads_full_windows(tone_file):
    source = WavFileAudioSource(tone_file, window_size=4096)
    assert source.sample_rate == SAMPLE_RATE
    assert source.channels == 1
    assert source.read_window() is None  # Not started

    assert source.start()
    windows = drain(source)
    assert len(windows) == SAMPLE_RATE // 4096
    assert all(len(window) == 4096 for window in windows)
    assert windows[1].timestamp == pytest.approx(4096 / SAMPLE_RATE)
    assert not source.is_running()


def test_wav_source_hop_size(tone_file):
    source = WavFileAudioSource(tone_file, window_size=4096, hop_size=2048)
    source.start()
    windows = drain(source)
    assert len(windows) == (SAMPLE_RATE - 4096) // 2048 + 1
    np.testing.assert_allclose(windows[0].samples[2048:], windows[1].samples[:2048])


def test_wav_source_loops(tone_file):
    source = WavFileAudioSource(tone_file, window_size=4096, loop=True)
    source.start()
    assert len(drain(source, limit=25)) == 25
    assert source.is_running()
    source.stop()
    assert not source.is_running()


def test_wav_source_gain(tone_file):
    plain = WavFileAudioSource(tone_file, window_size=1024)
    louder = WavFileAudioSource(tone_file, window_size=1024, gain=1.5)
    plain.start()
    louder.start()
    np.testing.assert_allclose(louder.read_window().samples, plain.read_window().samples * 1.5, rtol=1e-5)


def test_wav_source_takes_first_channel(tmp_path):
    path = tmp_path / "stereo.wav"
    t = np.arange(8192) / SAMPLE_RATE
    left = 0.5 * np.sin(2 * np.pi * 110.0 * t)
    sf.write(str(path), np.column_stack([left, np.zeros_like(left)]), SAMPLE_RATE)

    source = WavFileAudioSource(str(path), window_size=4096)
    assert source.channels == 2
    source.start()
    window = source.read_window()
    assert window.samples.ndim == 1
    np.testing.assert_allclose(window.samples, left[:4096], atol=1e-3)


def test_tone_source_is_phase_continuous():
    source = ToneAudioSource(220.0, window_size=512, max_windows=2)
    source.start()
    first, second = source.read_window(), source.read_window()
    assert source.read_window() is None
    assert not source.is_running()

    t = np.arange(1024) / SAMPLE_RATE
    expected = 0.5 * np.sin(2 * np.pi * 220.0 * t)
    np.testing.assert_allclose(np.concatenate([first.samples, second.samples]), expected, atol=1e-6)


def test_sequence_source_replays_windows():
    windows = [AudioWindow(np.full(16, float(i)), SAMPLE_RATE) for i in range(3)]
    source = SequenceAudioSource(windows, SAMPLE_RATE, 16)
    assert source.read_window() is None

    source.start()
    assert drain(source) == windows
    assert not source.is_running()
