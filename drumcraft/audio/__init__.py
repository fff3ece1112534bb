"""Audio capture and pitch estimation."""

from .pitch_estimator import PitchEstimator
from .audio_input import SoundDeviceInput

__all__ = ["PitchEstimator", "SoundDeviceInput"]
