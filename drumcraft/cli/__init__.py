"""Command-line interface for DrumCraft."""

from .main import main

__all__ = ["main"]
