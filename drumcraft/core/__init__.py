"""Core components for the DrumCraft application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioSource,
    IPitchEstimator,
    IListeningService,
)

__all__ = ["IAudioSource", "IPitchEstimator", "IListeningService"]
