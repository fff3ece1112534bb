"""Defines the core interfaces for the DrumCraft application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

from ..tuning_types import AudioWindow, PitchEstimate


class IAudioSource(ABC):
    """Interface for sources that hand out fixed-size audio windows."""

    @abstractmethod
    def start(self) -> bool:
        """Start capturing audio."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop capturing audio and release the underlying resource."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the source can still produce windows."""
        pass

    @abstractmethod
    def read_window(self) -> Optional[AudioWindow]:
        """Return the next window, or None if none is available yet."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> int:
        """The sample rate of the audio stream."""
        pass

    @property
    @abstractmethod
    def window_size(self) -> int:
        """Number of samples in each window."""
        pass


class IPitchEstimator(ABC):
    """Interface for pitch estimation algorithms."""

    @abstractmethod
    def estimate(self, window: AudioWindow) -> PitchEstimate:
        """Estimate the fundamental frequency of a window."""
        pass


class IListeningService(ABC):
    """Interface for the capture and estimation loop."""

    @abstractmethod
    def start(self, callback: Optional[Callable[[PitchEstimate], None]] = None) -> bool:
        """Start listening."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop listening."""
        pass

    @abstractmethod
    def is_listening(self) -> bool:
        """Check if the service is listening."""
        pass
