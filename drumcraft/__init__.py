"""DrumCraft: real-time drum head tuning aid."""

__version__ = "0.1.0"
